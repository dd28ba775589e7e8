"""HTTP middlewares for the StaffDesk API and the order they are installed in."""

from __future__ import annotations

from typing import Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .request_id import RequestIdMiddleware, principal_ctx_var, request_id_ctx_var
from .security_headers import SecurityHeadersMiddleware


def install_middlewares(app: FastAPI, *, allowed_origins: Sequence[str] = ()) -> None:
    """Add the middleware stack; the last one added runs first on a request."""

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID"],
        )


__all__ = [
    "install_middlewares",
    "principal_ctx_var",
    "request_id_ctx_var",
]
