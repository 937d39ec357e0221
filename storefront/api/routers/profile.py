# storefront/api/routers/profile.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_storefront, locked
from storefront.container import Storefront
from storefront.domain.schemas import CustomerProfile, ProfileSaveOut

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=CustomerProfile)
@locked
def get_profile(sf: Storefront = Depends(get_storefront)):
    return sf.profile_store.get()


@router.put("", response_model=ProfileSaveOut)
@locked
def save_profile(payload: CustomerProfile, sf: Storefront = Depends(get_storefront)):
    notification, errors = sf.profiles.save(payload)
    return ProfileSaveOut(
        profile=sf.profile_store.get(),
        notification=notification,
        errors=errors,
    )
