"""
EcoFinds API - application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ecofinds import __version__, config
from ecofinds.database import get_storage
from ecofinds.errors import EcoFindsError
from ecofinds.logging_config import setup_logging
from ecofinds.routers import auth_router, cart_router, product_router, purchase_router

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    storage = app.dependency_overrides.get(get_storage, get_storage)()
    storage.init_collections()
    logger.info("EcoFinds API starting (storage: %s)", type(storage).__name__)

    yield

    logger.info("EcoFinds API stopped")


app = FastAPI(
    title="EcoFinds API",
    description="Second-hand marketplace: listings, cart and checkout",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(product_router.router)
app.include_router(cart_router.router)
app.include_router(purchase_router.router)


# ============= ERROR HANDLERS =============

@app.exception_handler(EcoFindsError)
async def ecofinds_error_handler(request: Request, exc: EcoFindsError):
    logger.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    content = {"error": exc.message}
    if exc.details is not None:
        content["details"] = exc.details
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    logger.warning("%s %s -> 400: %s", request.method, request.url.path, "; ".join(messages))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "; ".join(messages) or "Invalid request"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = "Route not found"
    else:
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


# ============= HEALTH CHECK =============

@app.get("/health", tags=["Health"])
def health():
    return {"status": "OK", "message": "EcoFinds API is running"}
