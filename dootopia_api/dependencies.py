"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from dootopia_api.config import get_settings
from dootopia_api.db import DbClient, InMemoryDbClient, MongoDbClient, SqlDbClient
from dootopia_api.firebase import FirebaseTokenVerifier, TokenVerifier
from dootopia_api.images import CloudinaryImageHost, ImageHost, InMemoryImageHost

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_image_host: ImageHost | None = None
_token_verifier: TokenVerifier | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so documents persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        logger.info("Using in-memory document store")
        _db_client = InMemoryDbClient()
    elif settings.database_url.startswith(("mongodb://", "mongodb+srv://")):
        _db_client = MongoDbClient(settings.database_url, settings.database_name)
    else:
        _db_client = SqlDbClient(settings.database_url)
    return _db_client


def get_image_host() -> ImageHost:
    global _image_host
    if _image_host:
        return _image_host

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.cloudinary_configured:
        _image_host = InMemoryImageHost()
    else:
        _image_host = CloudinaryImageHost(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
        )
    return _image_host


def get_token_verifier() -> TokenVerifier:
    """
    Return the Firebase verifier. Only requested when auth is enabled, so
    firebase-admin is never initialised for open deployments.
    """
    global _token_verifier
    if _token_verifier:
        return _token_verifier

    settings = get_settings()
    _token_verifier = FirebaseTokenVerifier(
        service_account=settings.firebase_credentials
    )
    return _token_verifier
