from datetime import datetime, timezone
from sqlalchemy import Column, Integer, ForeignKey, Numeric, DateTime

from fulfillment.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class ChargesModel(Base):
    """Snapshot oplat dla koszyka, max jeden na uzytkownika."""

    __tablename__ = "charges"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)

    total_quantity = Column(Integer, nullable=False, default=0)
    total_price = Column(Numeric(10, 2), nullable=False, default=0)
    discount_price = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    delivery_charge = Column(Numeric(10, 2), nullable=False, default=0)
    handling_charge = Column(Numeric(10, 2), nullable=False, default=0)
    total_payable_amount = Column(Numeric(10, 2), nullable=False, default=0)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
