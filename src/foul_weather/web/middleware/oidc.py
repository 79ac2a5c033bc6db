# ABOUTME: Google OIDC verification for the Cloud Scheduler dispatch endpoints.
# ABOUTME: Token checks run in a worker thread; google-auth fetches signing certs synchronously.

import asyncio
from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request
from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from foul_weather.config import Settings, get_settings

log = structlog.get_logger()

GOOGLE_ISSUERS = frozenset({"https://accounts.google.com", "accounts.google.com"})

# One transport (and connection pool) shared by every verification.
_REQUEST = google_requests.Request()


def _bearer_token(request: Request) -> str:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        log.warning("scheduler_token_missing", path=request.url.path)
        raise HTTPException(
            status_code=401,
            detail="Bearer token required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token.strip()


async def verify_scheduler_token(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str | None:
    """Check that the caller holds a Google-signed ID token for this service.

    Verification is off when no ``scheduler_audience`` is configured, in which
    case None is returned. Otherwise returns the caller's service-account email
    (or subject).

    Raises:
        HTTPException: 401 for a missing, invalid or foreign-issued token; 503
            when Google's signing certificates cannot be fetched.
    """
    audience = settings.scheduler_audience
    if not audience:
        return None

    token = _bearer_token(request)
    try:
        claims = await asyncio.to_thread(
            id_token.verify_oauth2_token, token, _REQUEST, audience=audience
        )
    except google_auth_exceptions.TransportError as e:
        log.error("scheduler_certs_unavailable", error=str(e))
        raise HTTPException(status_code=503, detail="Cannot verify token right now") from e
    except ValueError as e:
        log.warning("scheduler_token_rejected", path=request.url.path, error=str(e))
        raise HTTPException(status_code=401, detail="Invalid OIDC token") from e

    issuer = claims.get("iss")
    if issuer not in GOOGLE_ISSUERS:
        log.warning("scheduler_token_foreign_issuer", issuer=issuer)
        raise HTTPException(status_code=401, detail="Invalid token issuer")

    caller = claims.get("email") or claims.get("sub")
    log.info("scheduler_token_verified", caller=caller, path=request.url.path)
    return caller


SchedulerCaller = Annotated[str | None, Depends(verify_scheduler_token)]
