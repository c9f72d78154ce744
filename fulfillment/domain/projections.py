# fulfillment/domain/projections.py
"""
Read-side projections.

Each function maps ORM rows to plain dicts with a fixed shape, so the
response contract does not depend on how the rows were loaded.
"""
from typing import Any, Dict, Iterable, Optional

FINANCIAL_FIELDS = (
    "total_quantity",
    "total_price",
    "discount_price",
    "tax",
    "delivery_charge",
    "handling_charge",
    "total_payable_amount",
)


def project_address(address) -> Optional[Dict[str, Any]]:
    if address is None:
        return None
    return {
        "id": address.id,
        "name": address.name,
        "email": address.email,
        "phone": address.phone,
        "address": address.address,
        "city": address.city,
        "state": address.state,
        "pincode": address.pincode,
        "country": address.country,
    }


def project_cart_item(item) -> Dict[str, Any]:
    stock = item.stock_record
    return {
        "id": item.id,
        "variant_id": item.variant_id,
        "stock_record_id": item.stock_record_id,
        "size": stock.size if stock else None,
        "quantity": item.quantity,
        "unit_price": stock.offer_price if stock else None,
        "actual_price": stock.actual_price if stock else None,
        "total_price": item.total_price,
        "available": stock.available if stock else None,
    }


def project_charges(charges) -> Optional[Dict[str, Any]]:
    if charges is None:
        return None
    data = {"id": charges.id, "user_id": charges.user_id}
    for field in FINANCIAL_FIELDS:
        data[field] = getattr(charges, field)
    return data


def project_order_item(item) -> Dict[str, Any]:
    stock = item.stock_record
    return {
        "id": item.id,
        "variant_id": item.variant_id,
        "stock_record_id": item.stock_record_id,
        "size": stock.size if stock else None,
        "quantity": item.quantity,
        "price": item.price,
    }


def project_order(order, items: Optional[Iterable] = None, address=None) -> Dict[str, Any]:
    data = {
        "id": order.id,
        "user_id": order.user_id,
        "address_id": order.address_id,
        "payment_mode": order.payment_mode,
        "payment_status": order.payment_status,
        "order_status": order.order_status,
        "delivery_status": order.delivery_status,
        "invoice_status": order.invoice_status,
        "invoice_url": order.invoice_url,
        "delivered_at": order.delivered_at,
        "cancelled_at": order.cancelled_at,
        "created_at": order.created_at,
    }
    for field in FINANCIAL_FIELDS:
        data[field] = getattr(order, field)
    data["items"] = [project_order_item(i) for i in (items if items is not None else order.items)]
    data["address"] = project_address(address if address is not None else order.address)
    return data


def event_payload(order: Dict[str, Any]) -> Dict[str, Any]:
    """Payload dla ORDER_CREATED / ORDER_UPDATED, z projekcji zamowienia."""
    return {
        "orderId": str(order["id"]),
        "orderStatus": order["order_status"],
        "deliveryStatus": order["delivery_status"],
        "paymentStatus": order["payment_status"],
    }


def invoice_event_payload(order) -> Dict[str, Any]:
    return {
        "orderId": str(order.id),
        "updates": {
            "invoiceStatus": order.invoice_status,
            "invoiceUrl": order.invoice_url,
        },
    }
