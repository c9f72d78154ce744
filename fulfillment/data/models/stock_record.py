#fulfillment/data/models/stock_record.py
from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint, UniqueConstraint

from fulfillment.data.database import Base


class StockRecordModel(Base):
    """Cena i stan magazynowy dla pary (wariant, rozmiar)."""

    __tablename__ = "stock_records"

    id = Column(Integer, primary_key=True)
    variant_id = Column(Integer, nullable=False, index=True)
    size = Column(String, nullable=False, default="Default")

    # zmieniane tylko warunkowym UPDATE w StockReservationEngine
    available = Column(Integer, nullable=False, default=0)
    actual_price = Column(Numeric(10, 2), nullable=False)
    offer_price = Column(Numeric(10, 2), nullable=False)

    __table_args__ = (
        UniqueConstraint("variant_id", "size", name="u_variant_size"),
        CheckConstraint("available >= 0", name="ck_stock_available_non_negative"),
    )
