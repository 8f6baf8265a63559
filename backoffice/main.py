# backoffice/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from backoffice.core.config import get_settings
from backoffice.core.errors import register_error_handlers
from backoffice.core.logging import configure_logging
from backoffice.database import create_db_and_tables, engine

# Import models so SQLModel metadata is populated before create_all()
from backoffice.models import user as _user_models  # noqa: F401
from backoffice.models import product as _product_models  # noqa: F401
from backoffice.models import cart as _cart_models  # noqa: F401
from backoffice.models import order as _order_models  # noqa: F401

# Routers
from backoffice.routers.orders import router as orders_router
from backoffice.routers.users import router as users_router

settings = get_settings()

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables before serving; nothing to release on shutdown."""
    logger.info("Creating tables on %s", engine.url.render_as_string(hide_password=True))
    try:
        create_db_and_tables()
    except Exception:
        logger.exception("Could not reach the order database")
        raise
    logger.info("Back-office API ready")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(orders_router, prefix=settings.API_V1_STR)
app.include_router(users_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "backoffice"}
