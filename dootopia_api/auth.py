"""
Request authentication dependency.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from firebase_admin import exceptions as firebase_exceptions

from dootopia_api.dependencies import get_token_verifier
from dootopia_api.firebase import TokenVerifier

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization")
    if not header or not header.lower().startswith("bearer "):
        return None
    return header.split(" ", 1)[1].strip() or None


def require_auth(
    request: Request, verifier: TokenVerifier = Depends(get_token_verifier)
) -> dict:
    """
    Verify the session cookie (or a bearer ID token) and attach the decoded
    claims to ``request.state.user``.
    """
    session_cookie = request.cookies.get(SESSION_COOKIE)
    token = None if session_cookie else _bearer_token(request)
    if not session_cookie and not token:
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        if session_cookie:
            claims = verifier.verify_session_cookie(session_cookie)
        else:
            claims = verifier.verify_id_token(token)
    except (firebase_exceptions.FirebaseError, ValueError) as exc:
        logger.info("Rejected credentials: %s", exc)
        raise HTTPException(status_code=401, detail="Unauthorized")

    request.state.user = claims
    return claims
