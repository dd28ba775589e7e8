"""Application factory and top-level wiring for the StaffDesk backend.

Brings together configuration, database setup, middleware, routers and error
handling. The ASGI server calls ``build_default_app`` as a factory; tests call
``create_app`` with their own database.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import http_exception_handler, unhandled_exception_handler, validation_exception_handler
from .core.logging import setup_logging
from .crud.users import ensure_admin
from .db.session import Base, SessionLocal, engine, get_db, make_session_factory
from .middlewares import install_middlewares

# Importing the models registers them with the metadata so create_all sees them.
from .models import document as _document  # noqa: F401
from .models import help_ticket as _help_ticket  # noqa: F401
from .models import location as _location  # noqa: F401
from .models import payment_record as _payment_record  # noqa: F401
from .models import user as _user  # noqa: F401
from .routers import auth as auth_router
from .routers import documents as documents_router
from .routers import employees as employees_router
from .routers import help_center as help_center_router
from .routers import locations as locations_router
from .routers import payment_records as payment_records_router

logger = logging.getLogger(__name__)


def _seed_admin(session_factory) -> None:
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        return
    db = session_factory()
    try:
        ensure_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, settings.ADMIN_NAME)
    finally:
        db.close()


def create_app(*, bind=None, session_factory=None, instrument: bool = True) -> FastAPI:
    """Build the API. ``bind``/``session_factory`` let tests swap the database."""

    bind = bind if bind is not None else engine
    if session_factory is None:
        session_factory = SessionLocal if bind is engine else make_session_factory(bind)

    Base.metadata.create_all(bind=bind)
    _seed_admin(session_factory)

    app = FastAPI(title=settings.APP_NAME)

    if session_factory is not SessionLocal:

        def _scoped_db():
            db = session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = _scoped_db

    install_middlewares(app, allowed_origins=settings.ALLOWED_ORIGINS)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(auth_router.router)
    app.include_router(employees_router.router)
    app.include_router(documents_router.router)
    app.include_router(locations_router.router)
    app.include_router(help_center_router.router)
    app.include_router(payment_records_router.router)

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    if instrument:
        Instrumentator().instrument(app).expose(app)

    return app


def build_default_app() -> FastAPI:
    setup_logging()
    return create_app()


__all__ = ["create_app", "build_default_app"]
