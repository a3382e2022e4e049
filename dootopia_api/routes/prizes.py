"""
Prize (avatar store) routes.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dootopia_api.db import PRIZES, USERS, DbClient
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
    PrizeCreate,
    PrizeCreatedResponse,
    PrizeUpdate,
    PurchaseRequest,
    PurchaseResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["prizes"])


@router.get("/prizes")
def list_prizes(
    userId: Optional[str] = Query(None), db: DbClient = Depends(get_db_client)
):
    filters = {"userId": userId} if userId else None
    return list_or_404(db.find_documents(PRIZES, filters), "No prizes found")


@router.get("/prizes/{prize_id}")
def get_prize(prize_id: str, db: DbClient = Depends(get_db_client)):
    return serialize(require_document(db, PRIZES, prize_id, "Prize not found"))


@router.post("/prizes", response_model=PrizeCreatedResponse, status_code=201)
def create_prize(payload: PrizeCreate, db: DbClient = Depends(get_db_client)):
    document = payload.model_dump()
    document["isCompleted"] = False
    document["createdAt"] = utc_now_iso()
    prize = db.insert_document(PRIZES, document)
    return PrizeCreatedResponse(acknowledged=True, insertedId=prize["_id"])


@router.put("/prizes/{prize_id}", response_model=MessageResponse)
def update_prize(
    prize_id: str, payload: PrizeUpdate, db: DbClient = Depends(get_db_client)
):
    fields = payload.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")
    result = db.update_document(PRIZES, prize_id, {"$set": fields})
    ensure_modified(result, "Prize not found")
    return MessageResponse(message="Prize updated successfully")


@router.post("/prizes/{prize_id}/purchase", response_model=PurchaseResponse)
def purchase_prize(
    prize_id: str, payload: PurchaseRequest, db: DbClient = Depends(get_db_client)
):
    """Spend points on a prize and add it to the user's inventory."""
    prize = require_document(db, PRIZES, prize_id, "Prize not found")
    user = require_document(db, USERS, payload.userId, "User not found")

    inventory = [str(item) for item in user.get("inventory") or []]
    if prize_id in inventory:
        raise HTTPException(status_code=409, detail="Prize already owned")

    cost = int(prize.get("pointsRequired") or 0)
    if current_points(user) < cost:
        raise HTTPException(status_code=400, detail="Not enough points")

    balance = change_points(db, payload.userId, -cost)
    db.update_document(USERS, payload.userId, {"$addToSet": {"inventory": prize_id}})
    logger.info("User %s purchased prize %s for %s points", payload.userId, prize_id, cost)
    return PurchaseResponse(
        message="Prize purchased successfully",
        points=balance if balance is not None else current_points(user) - cost,
        inventory=inventory + [prize_id],
    )


@router.delete("/prizes/{prize_id}", response_model=MessageResponse)
def delete_prize(prize_id: str, db: DbClient = Depends(get_db_client)):
    if not db.delete_document(PRIZES, prize_id):
        raise HTTPException(status_code=404, detail="Prize not found")
    return MessageResponse(message="Prize deleted successfully")
