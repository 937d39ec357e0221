# storefront/api/routers/session.py
import requests
from fastapi import APIRouter, Depends, HTTPException

from storefront.api.deps import get_storefront, locked
from storefront.container import Storefront
from storefront.domain.errors import ApiError
from storefront.domain.schemas import AuthState, LoginIn, SessionOut

router = APIRouter(prefix="/session", tags=["session"])


def _out(sf: Storefront, state: AuthState) -> SessionOut:
    return SessionOut(
        email=state.email,
        is_logged_in=state.is_logged_in,
        is_admin=sf.session.check_admin_status(state),
        has_admin_role=sf.session.has_admin_role(state),
    )


@router.get("", response_model=SessionOut)
@locked
def get_session(sf: Storefront = Depends(get_storefront)):
    return _out(sf, sf.session.state)


@router.post("/login", response_model=SessionOut)
@locked
def login(payload: LoginIn, sf: Storefront = Depends(get_storefront)):
    try:
        state = sf.session.authenticate(payload.email, payload.password)
    except ApiError as e:
        status = e.status_code if e.status_code in (400, 401, 403) else 502
        raise HTTPException(status_code=status, detail="Login failed")
    except requests.RequestException as e:
        raise HTTPException(status_code=502, detail=f"Shop API unavailable: {e}")

    sf.profiles.load_for(state.email)
    return _out(sf, state)


@router.post("/logout", response_model=SessionOut)
@locked
def logout(sf: Storefront = Depends(get_storefront)):
    return _out(sf, sf.session.logout())
