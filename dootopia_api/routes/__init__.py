"""
HTTP routes for the DooTopia API.
"""

from __future__ import annotations

from fastapi import APIRouter

from dootopia_api.routes import images, lists, prizes, rewards, tasks, users

router = APIRouter()
for _module in (users, tasks, lists, rewards, prizes, images):
    router.include_router(_module.router)
