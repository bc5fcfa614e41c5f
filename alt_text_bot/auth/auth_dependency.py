# alt_text_bot/auth/auth_dependency.py

from fastapi import Header, HTTPException, status
from typing import Optional
import logging
import secrets

from ..config import settings

logger = logging.getLogger("alt_text_bot.auth.dependency")

_warned_unauthenticated = False


async def verify_webhook_secret(authorization: Optional[str] = Header(None)) -> None:
    """
    FastAPI dependency that checks the 'Authorization: Bearer <secret>' header
    sent by the CMS against the configured WEBHOOK_SECRET.
    Every request is accepted when no secret is configured.
    """
    global _warned_unauthenticated

    expected = settings.WEBHOOK_SECRET
    if not expected:
        if not _warned_unauthenticated:
            logger.warning("WEBHOOK_SECRET is not set. Webhook requests are not authenticated.")
            _warned_unauthenticated = True
        return

    if not authorization:
        logger.warning("Missing Authorization header in webhook request.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is missing."
        )

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        logger.warning(f"Invalid Authorization scheme: '{scheme}'. Expected 'Bearer'.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication scheme. Must be 'Bearer'."
        )

    if not secrets.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Webhook request rejected: secret mismatch.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook secret."
        )
