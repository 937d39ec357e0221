# storefront/api/routers/checkout.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from storefront.api.deps import get_storefront, locked
from storefront.container import Storefront
from storefront.domain.schemas import (
    AddressIn,
    CheckoutOut,
    LoginFormIn,
    PaymentIn,
    ShippingQuote,
)

router = APIRouter(tags=["checkout"])


def _out(sf: Storefront) -> CheckoutOut:
    c = sf.checkout
    return CheckoutOut(
        current_step=c.current_step,
        step_name=c.step_name,
        errors=c.errors,
        customer=sf.profile_store.get(),
        payment=c.payment,
        selected_shipping=c.selected_shipping,
        totals=c.totals(),
        confirmation=c.confirmation,
        notifications=c.pop_notifications(),
    )


@router.get("/shipping-options", response_model=List[ShippingQuote])
@locked
def list_shipping_options(sf: Storefront = Depends(get_storefront)):
    return sf.checkout.shipping_quotes()


@router.get("/checkout", response_model=CheckoutOut)
@locked
def get_checkout(sf: Storefront = Depends(get_storefront)):
    return _out(sf)


@router.patch("/checkout/login", response_model=CheckoutOut)
@locked
def set_login(payload: LoginFormIn, sf: Storefront = Depends(get_storefront)):
    sf.checkout.set_login(email=payload.email, password=payload.password)
    return _out(sf)


@router.patch("/checkout/address", response_model=CheckoutOut)
@locked
def set_address(payload: AddressIn, sf: Storefront = Depends(get_storefront)):
    sf.checkout.set_address(**payload.model_dump())
    return _out(sf)


@router.patch("/checkout/payment", response_model=CheckoutOut)
@locked
def set_payment(payload: PaymentIn, sf: Storefront = Depends(get_storefront)):
    sf.checkout.set_payment(**payload.model_dump())
    return _out(sf)


@router.put("/checkout/shipping/{option_id}", response_model=CheckoutOut)
@locked
def select_shipping(option_id: int, sf: Storefront = Depends(get_storefront)):
    try:
        sf.checkout.select_shipping(option_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _out(sf)


@router.post("/checkout/next", response_model=CheckoutOut)
@locked
def next_step(sf: Storefront = Depends(get_storefront)):
    sf.checkout.next_step()
    return _out(sf)


@router.post("/checkout/prev", response_model=CheckoutOut)
@locked
def prev_step(sf: Storefront = Depends(get_storefront)):
    sf.checkout.prev_step()
    return _out(sf)


@router.post("/checkout/logout", response_model=CheckoutOut)
@locked
def logout(sf: Storefront = Depends(get_storefront)):
    sf.checkout.logout()
    return _out(sf)


@router.post("/checkout/reset", response_model=CheckoutOut)
@locked
def reset(sf: Storefront = Depends(get_storefront)):
    sf.checkout.reset()
    return _out(sf)
