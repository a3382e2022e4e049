"""
Pydantic schemas for the DooTopia API.

Field names are camelCase because that is what the mobile client sends and
reads back from the document store.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class Tag(BaseModel):
    label: str
    color: Optional[str] = Field(default=None, description="hex color like #RRGGBB")


class MessageResponse(BaseModel):
    message: str


class DeletedCount(BaseModel):
    deletedCount: int


class DeleteResponse(BaseModel):
    data: DeletedCount
    message: str


# Users


class UserCreate(BaseModel):
    firebaseUserId: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    points: int = 0
    createdAt: Optional[str] = None
    inventory: list[str] = Field(default_factory=list)
    selectedAvatarId: Optional[str] = None
    selectedAvatarUrl: Optional[str] = None


class UserCreatedResponse(BaseModel):
    message: str
    userId: str


class AvatarRequest(BaseModel):
    prizeId: Optional[str] = None


class AvatarResponse(BaseModel):
    message: str
    selectedAvatarId: str
    selectedAvatarUrl: Optional[str] = None


# Tasks


class TaskCreate(BaseModel):
    title: str
    text: str = ""
    completed: bool = False
    createdAt: Optional[str] = None
    points: int = 0
    userId: Optional[str] = None
    assignedToId: Optional[str] = None
    dueDate: Optional[str] = None
    tags: list[Tag] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    text: Optional[str] = None
    completed: Optional[bool] = None
    points: Optional[int] = None
    userId: Optional[str] = None
    assignedToId: Optional[str] = None
    dueDate: Optional[str] = None
    tags: Optional[list[Tag]] = None


class TaskCompletionRequest(BaseModel):
    completed: bool


class TaskCompletionResponse(BaseModel):
    task: dict
    pointsChange: int


class TaskReassignRequest(BaseModel):
    email: str


# Subtasks


class SubtaskCreate(BaseModel):
    title: Optional[str] = None
    text: Optional[str] = None
    parentTaskId: str
    completed: bool = False
    createdAt: Optional[str] = None
    points: int = 0
    userId: Optional[str] = None


class SubtaskUpdate(BaseModel):
    title: Optional[str] = None
    text: Optional[str] = None
    parentTaskId: Optional[str] = None
    completed: Optional[bool] = None
    points: Optional[int] = None


# Lists


class ListCreate(BaseModel):
    name: str = Field(..., min_length=1)
    userId: Optional[str] = None
    taskIds: list[str] = Field(default_factory=list)
    createdAt: Optional[str] = None


class ListRename(BaseModel):
    name: str = Field(..., min_length=1)


class ListTaskRequest(BaseModel):
    taskId: str


# Rewards


class RewardCreate(BaseModel):
    title: str
    description: str = ""
    points: int = Field(default=0, ge=0)
    imageUrl: Optional[str] = None
    owner: Optional[str] = None
    sharedWith: list[str] = Field(default_factory=list)


class RewardUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    points: Optional[int] = Field(default=None, ge=0)
    imageUrl: Optional[str] = None
    completed: Optional[bool] = None


class ShareRequest(BaseModel):
    userIds: list[str]


class RedeemRequest(BaseModel):
    userId: str


class RedeemResponse(BaseModel):
    message: str
    points: int
    reward: dict


# Prizes


class PrizeCreate(BaseModel):
    userId: Optional[str] = None
    title: str
    subtitle: Optional[str] = None
    content: Optional[str] = None
    pointsRequired: int = Field(default=0, ge=0)
    imageUrl: Optional[str] = None


class PrizeUpdate(BaseModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    content: Optional[str] = None
    pointsRequired: Optional[int] = Field(default=None, ge=0)
    imageUrl: Optional[str] = None
    isCompleted: Optional[bool] = None


class PrizeCreatedResponse(BaseModel):
    acknowledged: Literal[True]
    insertedId: str


class PurchaseRequest(BaseModel):
    userId: str


class PurchaseResponse(BaseModel):
    message: str
    points: int
    inventory: list[str]


# Images


class ImageDeleteRequest(BaseModel):
    publicId: Optional[str] = None
