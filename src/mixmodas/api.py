"""FastAPI application exposing the product catalog and customer account endpoints."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import logging
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from prometheus_client import Counter
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import hash_password, verify_password
from .config import Settings, settings as default_settings
from .database import Store
from .media import save_upload
from .schemas import (
    HealthResponse,
    LoginResponse,
    ProductCreatedResponse,
    ProductOut,
    RegisterResponse,
    StatusResponse,
    product_fields_from,
)
from .services import create_product, create_user, find_user_by_email, list_products


logger = logging.getLogger(__name__)

IMAGE_FIELD = "imagem"
IMAGE_PATH_FIELD = "imagePath"
ROUTE_NOT_FOUND = "Route not found"
FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")

# Prometheus counter to track API requests by method, endpoint and status code
REQUEST_COUNTER = Counter(
    "api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"],
)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> Store:
    """Return the application's store, refusing requests when it is down."""
    store: Store = request.app.state.store
    if not store.available:
        raise HTTPException(status_code=500, detail="Database unavailable")
    return store


def _database_status(request: Request) -> str:
    return "connected" if request.app.state.store.available else "disconnected"


def _content_type(request: Request) -> str:
    return request.headers.get("content-type", "").lower()


def _is_multipart(request: Request) -> bool:
    return "multipart/form-data" in _content_type(request)


async def _read_payload(request: Request) -> Dict[str, Any]:
    """Read a JSON or form body into a plain dict; unreadable JSON is empty."""
    content_type = _content_type(request)
    if any(kind in content_type for kind in FORM_CONTENT_TYPES):
        form = await request.form()
        return dict(form)
    try:
        data = await request.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _string_field(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


async def _resolve_image_path(
    request: Request, data: Dict[str, Any], upload_dir: str
) -> Optional[str]:
    """Store an attached image, or fall back to a caller-supplied path."""
    upload = data.get(IMAGE_FIELD)
    if _is_multipart(request) and isinstance(upload, UploadFile) and upload.filename:
        try:
            return await run_in_threadpool(
                save_upload, upload.file, upload.filename, upload_dir
            )
        except OSError as exc:
            logger.exception("upload failed for %s", upload.filename)
            raise HTTPException(status_code=500, detail="Upload error") from exc
    return _string_field(data, IMAGE_PATH_FIELD) or None


def create_app(
    app_settings: Optional[Settings] = None, store: Optional[Store] = None
) -> FastAPI:
    """Build the application around a store handle.

    When no store is given one is opened from ``app_settings.database_url``.
    """
    app_settings = app_settings or default_settings
    store = store or Store.open(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.store.dispose()

    app = FastAPI(title=app_settings.api_title, lifespan=lifespan)
    app.state.settings = app_settings
    app.state.store = store

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log incoming requests and their outcomes while updating metrics."""
        logger.info("request %s %s", request.method, request.url.path)
        try:
            response = await call_next(request)
            REQUEST_COUNTER.labels(
                method=request.method,
                endpoint=request.url.path,
                status=str(response.status_code),
            ).inc()
            logger.info(
                "response %s %s status %s",
                request.method,
                request.url.path,
                response.status_code,
            )
            return response
        except Exception:
            REQUEST_COUNTER.labels(
                method=request.method,
                endpoint=request.url.path,
                status="500",
            ).inc()
            logger.exception(
                "error handling %s %s", request.method, request.url.path
            )
            raise

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # unknown paths and unsupported methods on known paths look the same
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"error": ROUTE_NOT_FOUND})
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/", response_model=StatusResponse)
    def root(request: Request):
        """Return a short status summary of the service."""
        return StatusResponse(
            message=f"{app_settings.api_title} online",
            database=_database_status(request),
            timestamp=datetime.now(timezone.utc),
        )

    @app.get("/api/health", response_model=HealthResponse)
    def health(request: Request):
        return HealthResponse(
            database=_database_status(request),
            timestamp=datetime.now(timezone.utc),
        )

    @app.get("/api/produtos", response_model=List[ProductOut])
    async def get_products(
        category: Optional[str] = None,
        categoria: Optional[str] = None,
        store: Store = Depends(get_store),
    ):
        """Return all products, optionally filtered by category.

        ``categoria`` is the legacy name of the filter.
        """
        return await run_in_threadpool(list_products, store, category or categoria)

    @app.post("/api/produtos", response_model=ProductCreatedResponse)
    async def post_product(
        request: Request,
        store: Store = Depends(get_store),
        settings: Settings = Depends(get_settings),
    ):
        """Create a product from a JSON, form or multipart body."""
        data = await _read_payload(request)
        fields = product_fields_from(data)
        if fields is None:
            raise HTTPException(status_code=400, detail="Name and price are required")

        image_path = await _resolve_image_path(request, data, settings.upload_dir)
        product = await run_in_threadpool(
            create_product, store, fields.model_copy(update={"image_path": image_path})
        )
        return ProductCreatedResponse(product=product)

    @app.post("/api/cadastro", response_model=RegisterResponse)
    async def register(
        request: Request,
        store: Store = Depends(get_store),
        settings: Settings = Depends(get_settings),
    ):
        """Register a customer with a hashed password."""
        data = await _read_payload(request)
        name = _string_field(data, "name")
        email = _string_field(data, "email")
        password = _string_field(data, "password")
        if not name or not email or not password:
            raise HTTPException(status_code=400, detail="All fields are required")

        password_hash = await run_in_threadpool(
            hash_password, password, settings.bcrypt_rounds
        )
        await run_in_threadpool(create_user, store, name, email, password_hash)
        return RegisterResponse()

    @app.post("/api/login", response_model=LoginResponse)
    async def login(request: Request, store: Store = Depends(get_store)):
        data = await _read_payload(request)
        email = _string_field(data, "email")
        password = _string_field(data, "password")
        if not email or not password:
            raise HTTPException(
                status_code=400, detail="Email and password are required"
            )

        user = await run_in_threadpool(find_user_by_email, store, email)
        if user is None or not await run_in_threadpool(
            verify_password, password, user.password_hash
        ):
            raise HTTPException(status_code=401, detail="Invalid credentials")
        return LoginResponse(email=user.email, role=user.role)

    return app
