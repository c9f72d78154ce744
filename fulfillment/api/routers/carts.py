# fulfillment/api/routers/carts.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fulfillment.data.database import get_db
from fulfillment.domain.schemas import (
    ApiResponse,
    CartItemIn,
    CartItemOut,
    CartItemUpdate,
    CartOut,
    ChargesOut,
)
from fulfillment.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=ApiResponse[CartOut])
def get_cart(user_id: int = Query(..., gt=0), db: Session = Depends(get_db)):
    svc = get_service(db)
    return ApiResponse(data=svc.get_cart(user_id), message="Cart fetched successfully")


@router.get("/charges", response_model=ApiResponse[ChargesOut])
def get_charges(user_id: int = Query(..., gt=0), db: Session = Depends(get_db)):
    svc = get_service(db)
    return ApiResponse(data=svc.get_charges(user_id), message="Charges fetched successfully")


@router.post("", response_model=ApiResponse[CartItemOut], status_code=201)
def add_item(
    payload: CartItemIn,
    user_id: int = Query(..., gt=0),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    item = svc.add_item(
        user_id=user_id,
        variant_id=payload.variant_id,
        stock_record_id=payload.stock_record_id,
        quantity=payload.quantity,
    )
    return ApiResponse(data=item, message="Product added to cart")


@router.put("/{cart_item_id}", response_model=ApiResponse[CartItemOut])
def update_item(
    cart_item_id: int,
    payload: CartItemUpdate,
    user_id: int = Query(..., gt=0),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    item = svc.update_item(
        user_id=user_id,
        cart_item_id=cart_item_id,
        quantity=payload.quantity,
        stock_record_id=payload.stock_record_id,
    )
    return ApiResponse(data=item, message="Cart item updated")


@router.delete("/{cart_item_id}", response_model=ApiResponse[dict])
def remove_item(
    cart_item_id: int,
    user_id: int = Query(..., gt=0),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    return ApiResponse(data=svc.remove_item(user_id, cart_item_id), message="Cart item removed")
