"""Integration tests for API endpoints"""

from unittest.mock import patch

from factories import HEADER, corrupt_workbook_part, make_record, make_row
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from pension_gateway.api.main import create_app
from pension_gateway.infrastructure.database.models import PensionRecordRow
from pension_gateway.infrastructure.database.repositories import PensionRepository


def _seed(db, records):
    repo = PensionRepository(db)
    for record in records:
        repo.create(record)
    db.commit()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    client.post("/v1/pensions/risk-stats", json={})
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "pension_risk_stats_requests_total" in response.text


def test_risk_stats_unfiltered(client: TestClient, db):
    """Test POST /v1/pensions/risk-stats without filters"""
    _seed(db, [make_record(predicted_risk_tier=t) for t in [0, 0, 1, 1, 2]])

    response = client.post("/v1/pensions/risk-stats", json={})

    assert response.status_code == 200
    data = sorted(response.json(), key=lambda s: s["tier"])
    assert [(s["riskLevel"], s["count"]) for s in data] == [
        ("low risk", 2),
        ("medium risk", 2),
        ("high risk", 1),
    ]
    assert [round(s["percentage"], 2) for s in data] == [40.0, 40.0, 20.0]


def test_risk_stats_filters(client: TestClient, db):
    """Test region, status and advantage filters combine"""
    _seed(
        db,
        [
            make_record(region_code="16", pension_status="décès", advantage_code="1", predicted_risk_tier=0),
            make_record(region_code="16", pension_status="décès", advantage_code="0", predicted_risk_tier=2),
            make_record(region_code="16", pension_status="révision", advantage_code="1", predicted_risk_tier=1),
            make_record(region_code="31", pension_status="décès", advantage_code="1", predicted_risk_tier=1),
        ],
    )

    response = client.post(
        "/v1/pensions/risk-stats",
        json={"wilaya": "16", "categories": ["décès"], "advantages": ["direct", "unknown-group"]},
    )

    assert response.status_code == 200
    assert response.json() == [{"tier": 0, "riskLevel": "low risk", "count": 1, "percentage": 100.0}]


def test_risk_stats_query_parameters(client: TestClient, db):
    """Test GET variant with repeated query parameters"""
    _seed(
        db,
        [
            make_record(advantage_code="0", predicted_risk_tier=2),
            make_record(advantage_code="H", predicted_risk_tier=1),
            make_record(advantage_code="1", predicted_risk_tier=0),
        ],
    )

    response = client.get("/v1/pensions/risk-stats?advantages=(Vide)&advantages=fille majeur")

    assert response.status_code == 200
    assert sorted((s["riskLevel"], s["count"]) for s in response.json()) == [("high risk", 1), ("medium risk", 1)]


def test_risk_stats_no_match(client: TestClient):
    """Test an empty distribution is a successful response"""
    response = client.post("/v1/pensions/risk-stats", json={"region": "99"})
    assert response.status_code == 200
    assert response.json() == []


@patch("pension_gateway.infrastructure.database.repositories.PensionRepository.count_by_risk_tier")
def test_risk_stats_storage_failure(mock_count, client: TestClient):
    """Test storage failure is an explicit 503, never a partial result"""
    mock_count.side_effect = OperationalError("SELECT", {}, Exception("db down"))

    response = client.post("/v1/pensions/risk-stats", json={})

    assert response.status_code == 503


def test_import_workbook(client: TestClient, db, write_workbook):
    """Test POST /v1/pensions/import with raw workbook bytes"""
    path = write_workbook([HEADER, make_row(pension_number="P1"), make_row(pension_number="P2", sex="F")[:3]])

    response = client.post(
        "/v1/pensions/import",
        content=path.read_bytes(),
        headers={"Content-Type": "application/octet-stream", "X-File-Name": "pensions.xlsx"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["sheet_name"] == "Feuil1"
    assert data["accepted_count"] == 1
    assert data["rejected_count"] == 1
    assert data["rejections"] == [{"position": 3, "reason": "insufficient-columns"}]
    assert db.query(PensionRecordRow).count() == 1


def test_import_header_only(client: TestClient, write_workbook):
    """Test a header-only workbook is refused with 422"""
    path = write_workbook([HEADER])

    response = client.post("/v1/pensions/import", content=path.read_bytes())

    assert response.status_code == 422


def test_import_unreadable(client: TestClient):
    """Test bytes that are not a workbook give 400"""
    response = client.post("/v1/pensions/import", content=b"plain text")
    assert response.status_code == 400


def test_import_malformed_workbook_xml(client: TestClient, write_workbook):
    """Test a zip with a broken workbook part gives 400, not 500"""
    path = corrupt_workbook_part(write_workbook([HEADER, make_row()]), "xl/workbook.xml")

    response = client.post("/v1/pensions/import", content=path.read_bytes())

    assert response.status_code == 400


def test_import_empty_body(client: TestClient):
    """Test an empty body gives 400"""
    response = client.post("/v1/pensions/import", content=b"")
    assert response.status_code == 400


def test_import_from_path(client: TestClient, db, write_workbook):
    """Test importing a workbook from the import directory"""
    write_workbook([HEADER, make_row()], name="imports/march.xlsx")

    response = client.post("/v1/pensions/import/path", json={"file_name": "march.xlsx"})

    assert response.status_code == 200
    assert response.json()["accepted_count"] == 1


def test_import_from_path_outside_directory(client: TestClient, write_workbook):
    """Test paths escaping the import directory are refused"""
    write_workbook([HEADER, make_row()], name="outside.xlsx")

    response = client.post("/v1/pensions/import/path", json={"file_name": "../outside.xlsx"})

    assert response.status_code == 400


def test_import_from_path_missing(client: TestClient):
    """Test an absent file gives 404"""
    response = client.post("/v1/pensions/import/path", json={"file_name": "nope.xlsx"})
    assert response.status_code == 404


def test_data_quality(client: TestClient, db):
    """Test unmapped advantage codes are listed with the table version"""
    _seed(db, [make_record(advantage_code=c) for c in ["1", "Q"]])

    response = client.get("/v1/pensions/data-quality")

    assert response.status_code == 200
    assert response.json() == {"advantage_groups_version": "2", "unmapped_advantage_codes": ["Q"]}


def test_startup_imports_directory(settings, session_factory, db, write_workbook):
    """Test workbooks in the import directory are loaded on startup"""
    write_workbook([HEADER, make_row(pension_number="S1"), make_row(pension_number="S2")], name="imports/s.xlsx")

    with TestClient(create_app(settings)) as client:
        assert client.get("/health").status_code == 200

    assert db.query(PensionRecordRow).count() == 2


def test_list_pensions_pagination(client: TestClient, db, settings):
    """Test GET /v1/pensions uses the configured default and maximum page sizes"""
    _seed(db, [make_record(pension_number=f"P{i:03d}") for i in range(settings.max_page_size + 5)])

    response = client.get("/v1/pensions")
    assert response.status_code == 200
    data = response.json()
    assert len(data["data"]) == settings.default_page_size
    assert data["data"][0]["pension_number"] == "P000"
    assert data["meta"] == {
        "total": settings.max_page_size + 5,
        "page": 1,
        "limit": settings.default_page_size,
        "offset": 0,
    }

    response = client.get("/v1/pensions?limit=10000")
    assert len(response.json()["data"]) == settings.max_page_size
    assert response.json()["meta"]["limit"] == settings.max_page_size

    response = client.get("/v1/pensions?page=2&limit=100")
    assert [r["pension_number"] for r in response.json()["data"]] == [f"P{i:03d}" for i in range(100, 105)]


def test_list_pensions_invalid_limit(client: TestClient):
    """Test a zero page size is a validation error"""
    response = client.get("/v1/pensions?limit=0")
    assert response.status_code == 422
