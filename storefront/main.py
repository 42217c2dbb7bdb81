# storefront/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from storefront import __version__
from storefront.api.errors import register_error_handlers
from storefront.api.rate_limit import RateLimitMiddleware
from storefront.api.routers import (
    admin,
    blog,
    categories,
    contact,
    coupons,
    health,
    orders,
    payments,
    products,
    testimonials,
    users,
)
from storefront.data.database import Base, init_db
from storefront.data.seed import seed
from storefront.services.rate_limiter import RateLimiter
from storefront.utils.logging import get_logger
from storefront.utils.settings import SEED_DEMO_DATA

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"Database ready, tables: {sorted(Base.metadata.tables.keys())}")
    if SEED_DEMO_DATA:
        seed()
    yield


def create_app(rate_limiter: RateLimiter | None = None) -> FastAPI:
    app = FastAPI(
        title="Storefront API",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.rate_limiter = rate_limiter or RateLimiter()

    register_error_handlers(app)
    app.add_middleware(RateLimitMiddleware)

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(categories.router)
    app.include_router(products.router)
    app.include_router(coupons.router)
    app.include_router(orders.router)
    app.include_router(payments.router)
    app.include_router(admin.router)
    app.include_router(blog.router)
    app.include_router(testimonials.router)
    app.include_router(contact.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
