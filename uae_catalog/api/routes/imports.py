from __future__ import annotations

import logging
import secrets
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, File, Header, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from uae_catalog.config import settings
from uae_catalog.database import get_db
from uae_catalog.schemas.imports import ImportReport
from uae_catalog.services.pipeline import import_catalog, reload_catalog
from uae_catalog.services.sources import SourceFormatError, load_source


router = APIRouter(prefix="/admin", tags=["admin"])

logger = logging.getLogger(__name__)

_ALLOWED_SUFFIXES = {".json", ".csv", ".xlsx", ".xlsm", ".xls"}


def _require_import_token(x_import_token: str | None = Header(default=None)) -> None:
    expected = settings.import_api_token
    if not expected:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Import endpoint is disabled")
    if not x_import_token or not secrets.compare_digest(x_import_token, expected):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid import token")


@router.post("/import", response_model=ImportReport, dependencies=[Depends(_require_import_token)])
def upload_catalog(
    file: UploadFile = File(...),
    reset: bool = Query(default=False, description="Clear universities and programs before importing"),
    derive_universities: bool = Query(default=True, description="Create universities named by program rows"),
    db: Session = Depends(get_db),
) -> ImportReport:
    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in _ALLOWED_SUFFIXES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unsupported file type: {suffix or 'none'}")

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / f"upload{suffix}"
        path.write_bytes(file.file.read())
        try:
            batch = load_source(path)
        except (SourceFormatError, ValueError) as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    logger.info(
        "admin.import filename=%s reset=%s universities=%d programs=%d",
        file.filename,
        reset,
        len(batch.universities),
        len(batch.programs),
    )
    if reset:
        return reload_catalog(db, batch, derive_universities=derive_universities)
    return import_catalog(db, batch, derive_universities=derive_universities)
