# main.py
from pathlib import Path

from dotenv import load_dotenv

# Ensure repo-root .env is loaded for the running server process.
load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from uae_catalog.config import build_sqlalchemy_db_url, settings
from uae_catalog.database import Base, engine
import uae_catalog.models  # noqa: F401  # register tables on Base.metadata
from uae_catalog.api.routes.catalog import router as catalog_router
from uae_catalog.api.routes.health import router as health_router
from uae_catalog.api.routes.imports import router as imports_router


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health endpoints (do not depend on API_PREFIX)
    application.include_router(health_router)

    application.include_router(catalog_router, prefix=settings.api_prefix)
    application.include_router(imports_router, prefix=settings.api_prefix)

    # Avoid accidental schema changes in shared databases; scripts/create_orm_tables.py
    # is the explicit path there. For local/test sqlite, auto-create is convenient.
    if build_sqlalchemy_db_url(settings).startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    return application


app = create_app()
