# fulfillment/services/email_templates.py
from typing import Any, Dict, Tuple

from fulfillment.utils.settings import STORE_NAME


def payment_status_email(order: Dict[str, Any]) -> Tuple[str, str]:
    return (
        "Payment Status Updated",
        f"Payment status of your order #{order['id']} is now {order['payment_status']}.\n\n"
        f"Amount: {order['total_payable_amount']}\n\n{STORE_NAME}",
    )


def delivery_status_email(order: Dict[str, Any]) -> Tuple[str, str]:
    return (
        "Delivery Status Updated",
        f"Your order #{order['id']} is now {order['delivery_status']}.\n\n{STORE_NAME}",
    )


def order_cancelled_email(order: Dict[str, Any]) -> Tuple[str, str]:
    text = f"Your order #{order['id']} has been cancelled."
    if order["payment_status"] == "Refunded":
        text += f" A refund of {order['total_payable_amount']} has been initiated."
    return ("Your order has been cancelled", f"{text}\n\n{STORE_NAME}")


def invoice_email(user_name: str, order_id: int, total_amount) -> Tuple[str, str]:
    return (
        f"Invoice - Order {order_id}",
        f"Hi {user_name},\n\nThank you for shopping with {STORE_NAME}. "
        f"Your invoice for order #{order_id} (total {total_amount}) is attached.\n\n{STORE_NAME}",
    )
