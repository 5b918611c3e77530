"""
SQLAlchemy model for shops onboarded by field agents.

Agent shops track payment through an explicit ``payment_status`` and store the
agent's commission at creation time.
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from app.database import Base
from .enums import PaymentStatus

class AgentShop(Base):
    __tablename__ = "agent_shops"

    id = Column(Integer, primary_key=True, index=True)
    shop_name = Column(String, nullable=False)
    agent_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    # Location
    area = Column(String, nullable=True)
    address = Column(String, nullable=False, default="")
    city = Column(String, nullable=True)
    district = Column(String, nullable=True)

    # Plan & payment
    plan_type = Column(String, nullable=True, default="BASIC")
    plan_amount = Column(Numeric(10, 2), nullable=True)
    payment_status = Column(String, nullable=False, default=PaymentStatus.PENDING.value, index=True)
    agent_commission = Column(Numeric(10, 2), nullable=True)
    last_payment_date = Column(DateTime(timezone=True), nullable=True)
    payment_expiry_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_agent_shops_district", "district"),
        Index("ix_agent_shops_city", "city"),
    )
