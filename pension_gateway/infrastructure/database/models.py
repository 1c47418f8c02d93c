"""SQLAlchemy ORM models for the pension records table"""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, Numeric, SmallInteger, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class PensionRecordRow(Base):
    """Persisted beneficiary pension record"""

    __tablename__ = "pension_records"
    __table_args__ = (
        CheckConstraint("predicted_risk_tier IN (0, 1, 2)", name="ck_pension_records_risk_tier"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    region_code = Column(String(16), nullable=False, index=True)
    advantage_code = Column(String(8), nullable=False, index=True)
    pension_number = Column(Text, nullable=False)
    pension_status = Column(Text, nullable=False)
    birth_date = Column(Date, nullable=False)
    entitlement_date = Column(Date, nullable=False)
    sex = Column(String(8), nullable=False)
    net_monthly_amount = Column(Numeric(14, 2), nullable=False)
    direct_rate = Column(Numeric(7, 4), nullable=False)
    survivor_rate = Column(Numeric(7, 4), nullable=False)
    global_rate = Column(Numeric(7, 4), nullable=False)
    age_at_entitlement = Column(SmallInteger, nullable=False)
    pension_duration_months = Column(Integer, nullable=False)
    category_average_age = Column(SmallInteger, nullable=False)
    age_risk_flag = Column(SmallInteger, nullable=False)
    predicted_risk_tier = Column(SmallInteger, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
