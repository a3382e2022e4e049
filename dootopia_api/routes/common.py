"""
Helpers shared by the resource routers.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException

from dootopia_api.db import USERS, DbClient, UpdateResult
from dootopia_api.documents import serialize_all

logger = logging.getLogger(__name__)


def require_document(
    db: DbClient, collection: str, doc_id: str, detail: str
) -> dict:
    doc = db.get_document(collection, doc_id)
    if not doc:
        raise HTTPException(status_code=404, detail=detail)
    return doc


def list_or_404(docs: list[dict], detail: str) -> list[dict]:
    # The client treats the 404 as "nothing yet".
    if not docs:
        raise HTTPException(status_code=404, detail=detail)
    return serialize_all(docs)


def ensure_modified(result: UpdateResult, detail: str) -> None:
    if result.modified_count == 0:
        raise HTTPException(status_code=404, detail=detail)


def delete_response(deleted_count: int, message: str) -> dict:
    return {"data": {"deletedCount": deleted_count}, "message": message}


def change_points(db: DbClient, user_id: str, amount: int) -> Optional[int]:
    """Add ``amount`` (may be negative) to a user's points; returns the new balance."""
    result = db.update_document(USERS, user_id, {"$inc": {"points": amount}})
    if result.matched_count == 0:
        logger.warning("Points change of %s for unknown user %s", amount, user_id)
        return None
    user = db.get_document(USERS, user_id)
    balance = user.get("points", 0) if user else None
    logger.info("User %s points %+d -> %s", user_id, amount, balance)
    return balance


def current_points(user: dict) -> int:
    points = user.get("points") or 0
    try:
        return int(points)
    except (TypeError, ValueError):
        return 0

