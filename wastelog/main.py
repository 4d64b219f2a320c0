"""FastAPI entrypoint for the multi-branch waste review service."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from wastelog.api.v1.api import api_router
from wastelog.core.config import settings
from wastelog.db import session as db_session
from wastelog.db.base import Base
from wastelog.db.migrations import ensure_sqlite_schema
from wastelog.services.account_service import ensure_default_admin

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup() -> None:
    engine = db_session.engine
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema(engine)
    with db_session.SessionLocal() as session:
        try:
            admin_present = ensure_default_admin(session)
            logger.info("[BOOTSTRAP] default admin present: %s", "yes" if admin_present else "no")
        except Exception:
            logger.exception("[BOOTSTRAP] Admin bootstrap failed; continuing startup.")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.app_env}
