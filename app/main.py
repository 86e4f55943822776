
import logging
import traceback
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.config import settings
from app.database import engine
from app.errors import (
    StorefrontError, ValidationError, AuthError, ForbiddenError, NotFoundError, ConflictError,
    InvalidCoupon, MinimumOrderNotMet, InvalidTransition, ReturnWindowExpired, PaymentFailed,
)
from app.models import address as address_model  # noqa: F401
from app.models import cart as cart_model  # noqa: F401
from app.models import coupon as coupon_model
from app.models import order as order_model  # noqa: F401
from app.models import product as product_model  # noqa: F401
from app.models import user as user_model  # noqa: F401
from app.routers import addresses, admin, auth, cart, coupons, orders, products

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
coupon_model.Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Storefront API",
    description="Catalog, cart, checkout and order lifecycle for the apparel storefront",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(products.router)
app.include_router(cart.router)
app.include_router(orders.router)
app.include_router(coupons.router)
app.include_router(addresses.router)
app.include_router(admin.router)


@app.get("/health")
def health():
    return {"status": "healthy"}


# Map exception types to HTTP status codes; subclasses resolve through the MRO
ERROR_STATUS_CODES: dict = {
    ValidationError: 400,
    AuthError: 401,
    ForbiddenError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    InvalidCoupon: 400,
    MinimumOrderNotMet: 400,
    InvalidTransition: 400,
    ReturnWindowExpired: 400,
    PaymentFailed: 400,
}


def status_for(exc: StorefrontError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(status_code=status_for(exc), content={"message": exc.message})


# Proper JSON error with correct status code
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    if settings.is_production:
        content = {"message": "Internal Server Error"}
    else:
        content = {"message": str(exc) or "Internal Server Error", "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))}
    return JSONResponse(status_code=500, content=content)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
