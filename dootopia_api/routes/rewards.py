"""
Reward routes. Rewards are user-defined treats that cost points and can be
shared with other users.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dootopia_api.db import REWARDS, USERS, DbClient
from dootopia_api.dependencies import get_db_client
from dootopia_api.documents import serialize, utc_now_iso
from dootopia_api.routes.common import (
    change_points,
    current_points,
    ensure_modified,
    list_or_404,
    require_document,
)
from dootopia_api.schemas import (
    MessageResponse,
    RedeemRequest,
    RedeemResponse,
    RewardCreate,
    RewardUpdate,
    ShareRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["rewards"])


def _can_use(reward: dict, user_id: str) -> bool:
    return reward.get("owner") == user_id or user_id in (reward.get("sharedWith") or [])


@router.get("/rewards")
def list_rewards(
    userId: Optional[str] = Query(None, description="Owner or shared-with user"),
    db: DbClient = Depends(get_db_client),
):
    filters = {"$or": [{"owner": userId}, {"sharedWith": userId}]} if userId else None
    return list_or_404(db.find_documents(REWARDS, filters), "No rewards found")


@router.get("/rewards/{reward_id}")
def get_reward(reward_id: str, db: DbClient = Depends(get_db_client)):
    return serialize(require_document(db, REWARDS, reward_id, "Reward not found"))


@router.post("/rewards", status_code=201)
def create_reward(payload: RewardCreate, db: DbClient = Depends(get_db_client)):
    document = payload.model_dump()
    document["sharedWith"] = [
        uid for uid in dict.fromkeys(payload.sharedWith) if uid != payload.owner
    ]
    document["completed"] = False
    document["createdAt"] = utc_now_iso()
    return serialize(db.insert_document(REWARDS, document))


@router.put("/rewards/{reward_id}", response_model=MessageResponse)
def update_reward(
    reward_id: str, payload: RewardUpdate, db: DbClient = Depends(get_db_client)
):
    fields = payload.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")
    result = db.update_document(REWARDS, reward_id, {"$set": fields})
    ensure_modified(result, "Reward not found")
    return MessageResponse(message="Reward updated successfully")


@router.post("/rewards/{reward_id}/share")
def share_reward(
    reward_id: str, payload: ShareRequest, db: DbClient = Depends(get_db_client)
):
    """Replace the set of users the reward is shared with."""
    reward = require_document(db, REWARDS, reward_id, "Reward not found")
    shared_with = [
        uid for uid in dict.fromkeys(payload.userIds) if uid and uid != reward.get("owner")
    ]
    db.update_document(REWARDS, reward_id, {"$set": {"sharedWith": shared_with}})
    reward["sharedWith"] = shared_with
    return serialize(reward)


@router.post("/rewards/{reward_id}/redeem", response_model=RedeemResponse)
def redeem_reward(
    reward_id: str, payload: RedeemRequest, db: DbClient = Depends(get_db_client)
):
    reward = require_document(db, REWARDS, reward_id, "Reward not found")
    if reward.get("completed"):
        raise HTTPException(status_code=409, detail="Reward already redeemed")
    if not _can_use(reward, payload.userId):
        raise HTTPException(status_code=403, detail="Reward not available to user")

    user = require_document(db, USERS, payload.userId, "User not found")
    cost = int(reward.get("points") or 0)
    if current_points(user) < cost:
        raise HTTPException(status_code=400, detail="Not enough points")

    balance = change_points(db, payload.userId, -cost)
    db.update_document(REWARDS, reward_id, {"$set": {"completed": True}})
    reward["completed"] = True
    logger.info("User %s redeemed reward %s for %s points", payload.userId, reward_id, cost)
    return RedeemResponse(
        message="Reward redeemed successfully",
        points=balance if balance is not None else current_points(user) - cost,
        reward=serialize(reward),
    )


@router.delete("/rewards/{reward_id}", response_model=MessageResponse)
def delete_reward(reward_id: str, db: DbClient = Depends(get_db_client)):
    if not db.delete_document(REWARDS, reward_id):
        raise HTTPException(status_code=404, detail="Reward not found")
    return MessageResponse(message="Reward deleted successfully")
