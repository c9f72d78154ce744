from sqlalchemy import Column, Integer, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from fulfillment.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    variant_id = Column(Integer, nullable=False)
    stock_record_id = Column(Integer, ForeignKey("stock_records.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)  # offer_price * quantity

    order = relationship("OrderModel", back_populates="items")
    stock_record = relationship("StockRecordModel")
