from sqlalchemy import Column, Integer, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship

from fulfillment.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    variant_id = Column(Integer, nullable=False)
    stock_record_id = Column(Integer, ForeignKey("stock_records.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)

    stock_record = relationship("StockRecordModel")

    __table_args__ = (
        UniqueConstraint("user_id", "variant_id", "stock_record_id", name="u_user_variant_size"),
    )
