"""
Firebase Admin wiring for token verification.

Tokens are issued by Firebase on the client; this module only asks the
Admin SDK to verify what the client sends.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials

logger = logging.getLogger(__name__)


class TokenVerifier(Protocol):
    """Verifies credentials and returns the decoded claims."""

    def verify_session_cookie(self, cookie: str) -> dict:
        ...

    def verify_id_token(self, token: str) -> dict:
        ...


def init_firebase_app(service_account: Optional[dict] = None) -> firebase_admin.App:
    """Initialise the default Firebase app once per process."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if service_account:
        app = firebase_admin.initialize_app(credentials.Certificate(service_account))
        logger.info("firebase-admin initialized from service account settings")
    else:
        app = firebase_admin.initialize_app(credentials.ApplicationDefault())
        logger.info("firebase-admin initialized via application default credentials")
    return app


@dataclass
class FirebaseTokenVerifier:
    """Verifies Firebase session cookies and ID tokens, checking revocation."""

    service_account: Optional[dict] = None
    check_revoked: bool = True

    def __post_init__(self):
        self._app = init_firebase_app(self.service_account)

    def verify_session_cookie(self, cookie: str) -> dict:
        return firebase_auth.verify_session_cookie(
            cookie, check_revoked=self.check_revoked, app=self._app
        )

    def verify_id_token(self, token: str) -> dict:
        return firebase_auth.verify_id_token(
            token, check_revoked=self.check_revoked, app=self._app
        )
