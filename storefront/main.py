# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from storefront.api.routers import basket, checkout, health, profile, session
from storefront.container import Storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(storefront: Storefront | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "storefront", None) is None:
            app.state.storefront = Storefront.from_settings()
        logger.info("Storefront ready")
        yield
        app.state.storefront.close()

    app = FastAPI(
        title="Storefront",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.storefront = storefront

    # Include routers
    app.include_router(health.router)
    app.include_router(basket.router)
    app.include_router(session.router)
    app.include_router(profile.router)
    app.include_router(checkout.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
