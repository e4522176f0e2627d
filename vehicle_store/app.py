import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vehicle_store import __version__
from vehicle_store.accounts import AccountService
from vehicle_store.catalog import CatalogService
from vehicle_store.config import Settings, configure_logging
from vehicle_store.database import create_engine_from_url, create_session_factory, init_db
from vehicle_store.errors import StoreError
from vehicle_store.gate import AuthenticationGate
from vehicle_store.orders import OrderService
from vehicle_store.routes import auth, orders, users, vehicles
from vehicle_store.security import CredentialService
from vehicle_store.seed import seed_vehicles

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH", "HEAD"]


def _field_name(loc) -> str:
    # drop the leading "body"/"query" marker
    parts = [str(part) for part in loc[1:]] or [str(part) for part in loc]
    return ".".join(parts)


async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = {_field_name(err["loc"]): err["msg"] for err in exc.errors()}
    message = "; ".join(f"{name}: {msg}" for name, msg in fields.items()) or "Invalid request"
    return JSONResponse(status_code=400, content={"error": message, "fields": fields})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    engine = create_engine_from_url(settings.database_url)
    init_db(engine)
    session_factory = create_session_factory(engine)

    credentials = CredentialService(
        settings.secret_key,
        algorithm=settings.algorithm,
        expire_minutes=settings.access_token_expire_minutes,
        bcrypt_rounds=settings.bcrypt_rounds,
    )

    if settings.seed_sample_data:
        db = session_factory()
        try:
            seed_vehicles(db)
        finally:
            db.close()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        engine.dispose()

    app = FastAPI(
        lifespan=lifespan,
        title="Vehicle Store API",
        description="Browse vehicles, place orders and authenticate with bearer tokens",
        version=__version__,
    )
    app.state.session_factory = session_factory
    app.state.credentials = credentials
    app.state.accounts = AccountService(credentials)
    app.state.catalog = CatalogService()
    app.state.orders = OrderService()

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(vehicles.router)
    app.include_router(orders.router)

    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # added last so CORS wraps the gate and 401 responses still carry CORS headers
    app.add_middleware(AuthenticationGate, credentials=credentials, session_factory=session_factory)
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=["*"],
        expose_headers=["Authorization"],
        max_age=3600,
    )

    @app.get("/", tags=["Root"])
    def read_root():
        return {"message": "Vehicle Store API is running!"}

    logger.info("Vehicle Store API configured against %s", engine.url.render_as_string(hide_password=True))
    return app
