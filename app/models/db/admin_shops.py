"""
SQLAlchemy model for shops created from the admin panel.

Admin shops carry no explicit payment status; a shop counts as paid once
``last_payment_date`` has been recorded.
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Index
from sqlalchemy.sql import func
from app.database import Base

class AdminShop(Base):
    __tablename__ = "admin_shops"

    id = Column(Integer, primary_key=True, index=True)
    shop_name = Column(String, nullable=False)

    # Location (free text, inconsistently filled)
    area = Column(String, nullable=True)
    full_address = Column(String, nullable=False, default="")
    city = Column(String, nullable=True)
    district = Column(String, nullable=True)

    # Plan & payment
    plan_type = Column(String, nullable=True, default="BASIC")
    plan_amount = Column(Numeric(10, 2), nullable=True)
    last_payment_date = Column(DateTime(timezone=True), nullable=True)
    payment_expiry_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_admin_shops_district", "district"),
        Index("ix_admin_shops_city", "city"),
    )
