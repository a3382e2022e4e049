"""
Task list routes. A list only stores task ids; tasks are fetched separately.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dootopia_api.db import LISTS, DbClient
from dootopia_api.dependencies import get_db_client
from dootopia_api.documents import serialize, utc_now_iso
from dootopia_api.routes.common import list_or_404, require_document
from dootopia_api.schemas import ListCreate, ListRename, ListTaskRequest, MessageResponse

router = APIRouter(tags=["lists"])


@router.get("/lists")
def list_lists(
    userId: Optional[str] = Query(None), db: DbClient = Depends(get_db_client)
):
    filters = {"userId": userId} if userId else None
    return list_or_404(db.find_documents(LISTS, filters), "No lists found")


@router.get("/lists/{list_id}")
def get_list(list_id: str, db: DbClient = Depends(get_db_client)):
    return serialize(require_document(db, LISTS, list_id, "List not found"))


@router.post("/lists", status_code=201)
def create_list(payload: ListCreate, db: DbClient = Depends(get_db_client)):
    document = payload.model_dump()
    document["name"] = payload.name.strip()
    # Keep ids unique while preserving the caller's order.
    document["taskIds"] = list(dict.fromkeys(payload.taskIds))
    document["createdAt"] = payload.createdAt or utc_now_iso()
    return serialize(db.insert_document(LISTS, document))


@router.put("/lists/{list_id}", response_model=MessageResponse)
def rename_list(
    list_id: str, payload: ListRename, db: DbClient = Depends(get_db_client)
):
    result = db.update_document(LISTS, list_id, {"$set": {"name": payload.name.strip()}})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="List not found")
    return MessageResponse(message="List updated successfully")


@router.post("/lists/{list_id}/tasks")
def add_task_to_list(
    list_id: str, payload: ListTaskRequest, db: DbClient = Depends(get_db_client)
):
    require_document(db, LISTS, list_id, "List not found")
    db.update_document(LISTS, list_id, {"$addToSet": {"taskIds": payload.taskId}})
    return serialize(db.get_document(LISTS, list_id))


@router.delete("/lists/{list_id}/tasks/{task_id}")
def remove_task_from_list(
    list_id: str, task_id: str, db: DbClient = Depends(get_db_client)
):
    require_document(db, LISTS, list_id, "List not found")
    db.update_document(LISTS, list_id, {"$pull": {"taskIds": task_id}})
    return serialize(db.get_document(LISTS, list_id))


@router.delete("/lists/{list_id}", response_model=MessageResponse)
def delete_list(list_id: str, db: DbClient = Depends(get_db_client)):
    if not db.delete_document(LISTS, list_id):
        raise HTTPException(status_code=404, detail="List not found")
    return MessageResponse(message="List deleted successfully")
