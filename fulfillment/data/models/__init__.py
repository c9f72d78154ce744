#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from fulfillment.data.models.user import UserModel
from fulfillment.data.models.address import AddressModel
from fulfillment.data.models.stock_record import StockRecordModel
from fulfillment.data.models.cart_item import CartItemModel
from fulfillment.data.models.charges import ChargesModel
from fulfillment.data.models.order import OrderModel
from fulfillment.data.models.order_item import OrderItemModel

__all__ = [
    "UserModel",
    "AddressModel",
    "StockRecordModel",
    "CartItemModel",
    "ChargesModel",
    "OrderModel",
    "OrderItemModel",
]
