"""
User profile routes, including point balances and the selected avatar.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, HTTPException

from dootopia_api.db import PRIZES, USERS, DbClient
from dootopia_api.dependencies import get_db_client
from dootopia_api.documents import normalize_update, serialize, utc_now_iso
from dootopia_api.routes.common import (
    delete_response,
    ensure_modified,
    list_or_404,
    require_document,
)
from dootopia_api.schemas import (
    AvatarRequest,
    AvatarResponse,
    DeleteResponse,
    MessageResponse,
    UserCreate,
    UserCreatedResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


@router.get("/users")
def list_users(db: DbClient = Depends(get_db_client)):
    return list_or_404(db.find_documents(USERS), "No users found")


@router.get("/users/firebase/{firebase_user_id}")
def get_user_by_firebase_id(firebase_user_id: str, db: DbClient = Depends(get_db_client)):
    user = db.find_one(USERS, {"firebaseUserId": firebase_user_id})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return serialize(user)


@router.get("/users/email/{email}")
def get_user_by_email(email: str, db: DbClient = Depends(get_db_client)):
    user = db.find_one(USERS, {"email": email})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return serialize(user)


@router.get("/users/{user_id}")
def get_user(user_id: str, db: DbClient = Depends(get_db_client)):
    return serialize(require_document(db, USERS, user_id, "User not found"))


@router.post("/users", response_model=UserCreatedResponse, status_code=201)
def create_user(payload: UserCreate, db: DbClient = Depends(get_db_client)):
    document = payload.model_dump()
    document["createdAt"] = payload.createdAt or utc_now_iso()
    user = db.insert_document(USERS, document)
    logger.info("Created user %s", user["_id"])
    return UserCreatedResponse(
        message="User created successfully", userId=user["_id"]
    )


@router.put("/users/{user_id}", response_model=MessageResponse)
def update_user(
    user_id: str,
    body: dict = Body(...),
    db: DbClient = Depends(get_db_client),
):
    """
    Accepts plain fields or update operators; the client bumps points with
    ``{"$inc": {"points": n}}``.
    """
    update = normalize_update(body, allow_operators=True)
    result = db.update_document(USERS, user_id, update)
    ensure_modified(result, "User not found or not updated")
    return MessageResponse(message="User updated successfully")


@router.put("/users/{user_id}/avatar", response_model=AvatarResponse)
def select_avatar(
    user_id: str,
    payload: AvatarRequest,
    db: DbClient = Depends(get_db_client),
):
    if not payload.prizeId:
        raise HTTPException(status_code=400, detail="Missing prizeId")

    user = require_document(db, USERS, user_id, "User not found")
    inventory = [str(item) for item in user.get("inventory") or []]
    if payload.prizeId not in inventory:
        raise HTTPException(status_code=403, detail="Avatar not owned by user")

    prize = require_document(db, PRIZES, payload.prizeId, "Avatar not found")
    avatar = {
        "selectedAvatarId": payload.prizeId,
        "selectedAvatarUrl": prize.get("imageUrl") or None,
    }
    db.update_document(USERS, user_id, {"$set": avatar})
    return AvatarResponse(message="Avatar updated successfully", **avatar)


@router.delete("/users/{user_id}", response_model=DeleteResponse)
def delete_user(user_id: str, db: DbClient = Depends(get_db_client)):
    deleted = db.delete_document(USERS, user_id)
    return delete_response(deleted, "User deleted successfully")
