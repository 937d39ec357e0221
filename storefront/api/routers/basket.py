# storefront/api/routers/basket.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_storefront, locked
from storefront.container import Storefront
from storefront.domain.schemas import BasketItem, BasketItemIn, BasketOut, QuantityIn

router = APIRouter(prefix="/basket", tags=["basket"])


def _out(sf: Storefront, items) -> BasketOut:
    return BasketOut(items=items, total=sf.basket.total(items))


@router.get("", response_model=BasketOut)
@locked
def get_basket(sf: Storefront = Depends(get_storefront)):
    return _out(sf, sf.basket.load())


@router.post("/items", response_model=BasketOut)
@locked
def add_item(payload: BasketItemIn, sf: Storefront = Depends(get_storefront)):
    item = BasketItem(**payload.model_dump())
    return _out(sf, sf.basket.add(sf.basket.load(), item))


@router.put("/items/{product_id}", response_model=BasketOut)
@locked
def update_quantity(product_id: int, payload: QuantityIn, sf: Storefront = Depends(get_storefront)):
    items = sf.basket.update_quantity(
        sf.basket.load(),
        product_id,
        payload.quantity,
        payload.price,
        payload.name,
    )
    return _out(sf, items)


@router.delete("/items/{product_id}", response_model=BasketOut)
@locked
def remove_item(product_id: int, sf: Storefront = Depends(get_storefront)):
    return _out(sf, sf.basket.remove(sf.basket.load(), product_id))


@router.delete("", response_model=BasketOut)
@locked
def clear_basket(sf: Storefront = Depends(get_storefront)):
    return _out(sf, sf.basket.clear(sf.basket.load()))
