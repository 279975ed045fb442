import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from travelstore.database import create_db_and_tables
from travelstore.config import settings
from travelstore.pricing.errors import DivisionGuardFailed, PricingError
from travelstore.routes import (
    admin_cart,
    booking,
    cart,
    health,
)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Travel Store Cart API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PricingError)
async def pricing_error_handler(request: Request, exc: PricingError):
    if isinstance(exc, DivisionGuardFailed):
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.code}): {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "item_id": exc.item_id},
    )


app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(booking.router, prefix="/booking", tags=["Booking"])
app.include_router(admin_cart.router, prefix="/admin/cart", tags=["Admin Cart"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "cart": [
            "/cart", "/cart/add", "/cart/items/{id}",
            "/cart/items/{id}/coupon", "/cart/coupon", "/cart/coupons"
        ],
        "booking": [
            "/booking"
        ],
        "admin_cart": [
            "/admin/cart", "/admin/cart/{id}", "/admin/cart/{id}/discount"
        ],
        "health": [
            "/health/check"
        ]
    }
