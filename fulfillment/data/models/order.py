from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from fulfillment.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    address_id = Column(Integer, ForeignKey("addresses.id"), nullable=False)

    # zamrozona kopia snapshotu oplat
    total_quantity = Column(Integer, nullable=False, default=0)
    total_price = Column(Numeric(10, 2), nullable=False, default=0)
    discount_price = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    delivery_charge = Column(Numeric(10, 2), nullable=False, default=0)
    handling_charge = Column(Numeric(10, 2), nullable=False, default=0)
    total_payable_amount = Column(Numeric(10, 2), nullable=False, default=0)

    payment_mode = Column(String, nullable=False)  # COD, ONLINE
    payment_status = Column(String, nullable=False, default="Pending")
    order_status = Column(String, nullable=False, default="Active", index=True)
    delivery_status = Column(String, nullable=False, default="Pending", index=True)

    remote_order_ref = Column(String, nullable=True)
    remote_payment_ref = Column(String, nullable=True)

    invoice_status = Column(String, nullable=False, default="PENDING")
    invoice_url = Column(String, nullable=True)

    delivered_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    items = relationship("OrderItemModel", back_populates="order", order_by="OrderItemModel.id")
    address = relationship("AddressModel")
    user = relationship("UserModel")
