"""
Task and subtask routes.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dootopia_api.db import SUBTASKS, TASKS, USERS, DbClient
from dootopia_api.dependencies import get_db_client
from dootopia_api.documents import serialize, utc_now_iso
from dootopia_api.routes.common import (
    change_points,
    delete_response,
    ensure_modified,
    list_or_404,
    require_document,
)
from dootopia_api.schemas import (
    DeleteResponse,
    MessageResponse,
    SubtaskCreate,
    SubtaskUpdate,
    TaskCompletionRequest,
    TaskCompletionResponse,
    TaskCreate,
    TaskReassignRequest,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


def _credited_user(task: dict) -> Optional[str]:
    return task.get("assignedToId") or task.get("userId")


def _task_points(task: dict) -> int:
    try:
        return int(task.get("points") or 0)
    except (TypeError, ValueError):
        return 0


@router.get("/tasks")
def list_tasks(
    userId: Optional[str] = Query(None, description="Creator or assignee"),
    db: DbClient = Depends(get_db_client),
):
    filters = {"$or": [{"userId": userId}, {"assignedToId": userId}]} if userId else None
    return list_or_404(db.find_documents(TASKS, filters), "No tasks found")


@router.get("/tasks/{task_id}")
def get_task(task_id: str, db: DbClient = Depends(get_db_client)):
    return serialize(require_document(db, TASKS, task_id, "Task not found"))


@router.post("/tasks", status_code=201)
def create_task(payload: TaskCreate, db: DbClient = Depends(get_db_client)):
    document = payload.model_dump()
    document["createdAt"] = payload.createdAt or utc_now_iso()
    document["assignedToId"] = payload.assignedToId or payload.userId
    task = db.insert_document(TASKS, document)
    return serialize(task)


@router.put("/tasks/{task_id}", response_model=MessageResponse)
def update_task(
    task_id: str, payload: TaskUpdate, db: DbClient = Depends(get_db_client)
):
    fields = payload.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")
    result = db.update_document(TASKS, task_id, {"$set": fields})
    ensure_modified(result, "Task not found or not updated")
    return MessageResponse(message="Task updated successfully")


@router.post("/tasks/{task_id}/completion", response_model=TaskCompletionResponse)
def set_task_completion(
    task_id: str,
    payload: TaskCompletionRequest,
    db: DbClient = Depends(get_db_client),
):
    """
    Mark a task complete or incomplete. Completing credits the task's points
    to the assignee (or creator); un-completing takes them back.
    """
    task = require_document(db, TASKS, task_id, "Task not found")
    points_change = 0
    if bool(task.get("completed")) != payload.completed:
        db.update_document(TASKS, task_id, {"$set": {"completed": payload.completed}})
        user_id = _credited_user(task)
        points = _task_points(task)
        if user_id and points:
            points_change = points if payload.completed else -points
            change_points(db, user_id, points_change)
        task["completed"] = payload.completed
    return TaskCompletionResponse(task=serialize(task), pointsChange=points_change)


@router.post("/tasks/{task_id}/reassign")
def reassign_task(
    task_id: str,
    payload: TaskReassignRequest,
    db: DbClient = Depends(get_db_client),
):
    require_document(db, TASKS, task_id, "Task not found")
    user = db.find_one(USERS, {"email": payload.email.strip()})
    if not user:
        raise HTTPException(status_code=404, detail="No user found with that email")
    db.update_document(TASKS, task_id, {"$set": {"assignedToId": user["_id"]}})
    return serialize(db.get_document(TASKS, task_id))


@router.delete("/tasks/{task_id}", response_model=DeleteResponse)
def delete_task(task_id: str, db: DbClient = Depends(get_db_client)):
    deleted = db.delete_document(TASKS, task_id)
    return delete_response(deleted, "Task deleted successfully")


@router.get("/subtasks")
def list_subtasks(
    parentTaskId: Optional[str] = Query(None),
    db: DbClient = Depends(get_db_client),
):
    filters = {"parentTaskId": parentTaskId} if parentTaskId else None
    return list_or_404(db.find_documents(SUBTASKS, filters), "No subtasks found")


@router.get("/subtasks/{subtask_id}")
def get_subtask(subtask_id: str, db: DbClient = Depends(get_db_client)):
    return serialize(require_document(db, SUBTASKS, subtask_id, "Subtask not found"))


@router.post("/subtasks", status_code=201)
def create_subtask(payload: SubtaskCreate, db: DbClient = Depends(get_db_client)):
    text = (payload.text or payload.title or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Subtask text is required")
    document = payload.model_dump()
    document["text"] = payload.text or text
    document["title"] = payload.title or text
    document["createdAt"] = payload.createdAt or utc_now_iso()
    return serialize(db.insert_document(SUBTASKS, document))


@router.put("/subtasks/{subtask_id}", response_model=MessageResponse)
def update_subtask(
    subtask_id: str, payload: SubtaskUpdate, db: DbClient = Depends(get_db_client)
):
    fields = payload.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")
    result = db.update_document(SUBTASKS, subtask_id, {"$set": fields})
    ensure_modified(result, "Subtask not found or not updated")
    return MessageResponse(message="Subtask updated successfully")


@router.delete("/subtasks/{subtask_id}", response_model=MessageResponse)
def delete_subtask(subtask_id: str, db: DbClient = Depends(get_db_client)):
    if not db.delete_document(SUBTASKS, subtask_id):
        raise HTTPException(status_code=404, detail="Subtask not found")
    return MessageResponse(message="Subtask deleted successfully")
