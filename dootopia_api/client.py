"""
HTTP client for the DooTopia API.

Mirrors the mobile app's data-access layer: one method per endpoint, reads
of tasks, lists, prizes and the signed-in profile served from a DataCache,
and writes invalidating the slots they affect.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from dootopia_api import cache as cache_slots
from dootopia_api.cache import PROFILE_TTL_SECONDS, DataCache

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, payload: Any = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.payload = payload


class DooTopiaClient:
    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        *,
        session: Optional[requests.Session] = None,
        cache: Optional[DataCache] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.cache = cache if cache is not None else DataCache()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Transport

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not response.ok:
            message = (
                payload.get("error")
                if isinstance(payload, dict) and payload.get("error")
                else response.reason or "Request failed"
            )
            raise ApiError(response.status_code, str(message), payload)
        return payload

    def _list(self, path: str, params: Optional[dict] = None) -> list:
        # Empty collections come back as 404 "No ... found".
        try:
            return self._request("GET", path, params=params)
        except ApiError as exc:
            if exc.status_code == 404:
                return []
            raise

    def _cached_list(
        self, slot: str, path: str, owner: Optional[str], force_refresh: bool
    ) -> list:
        cached = self.cache.get(slot)
        if not force_refresh and cached and cached["owner"] == owner:
            logger.debug("Using cached %s", slot)
            return cached["items"]
        params = {"userId": owner} if owner else None
        items = self._list(path, params)
        self.cache.set(slot, {"owner": owner, "items": items})
        return items

    def health(self) -> dict:
        return self._request("GET", "/")

    # ------------------------------------------------------------------
    # Users

    def list_users(self) -> list:
        return self._list("/users")

    def get_user(self, user_id: str) -> dict:
        return self._request("GET", f"/users/{user_id}")

    def get_user_by_email(self, email: str) -> dict:
        return self._request("GET", f"/users/email/{email}")

    def get_user_by_firebase_id(
        self, firebase_user_id: str, *, force_refresh: bool = False
    ) -> dict:
        cached = self.cache.get(cache_slots.USER_PROFILE, ttl=PROFILE_TTL_SECONDS)
        if not force_refresh and cached and cached["firebaseUserId"] == firebase_user_id:
            return cached["profile"]
        profile = self._request("GET", f"/users/firebase/{firebase_user_id}")
        self.cache.set(
            cache_slots.USER_PROFILE,
            {"firebaseUserId": firebase_user_id, "profile": profile},
        )
        return profile

    def create_user(self, user: dict) -> dict:
        return self._request("POST", "/users", json=user)

    def update_user(self, user_id: str, update: dict) -> dict:
        result = self._request("PUT", f"/users/{user_id}", json=update)
        self.cache.invalidate(cache_slots.USER_PROFILE)
        return result

    def add_points(self, user_id: str, amount: int) -> dict:
        return self.update_user(user_id, {"$inc": {"points": amount}})

    def select_avatar(self, user_id: str, prize_id: str) -> dict:
        result = self._request(
            "PUT", f"/users/{user_id}/avatar", json={"prizeId": prize_id}
        )
        self.cache.invalidate(cache_slots.USER_PROFILE)
        return result

    def delete_user(self, user_id: str) -> dict:
        result = self._request("DELETE", f"/users/{user_id}")
        self.cache.invalidate(cache_slots.USER_PROFILE)
        return result

    # ------------------------------------------------------------------
    # Tasks and subtasks

    def list_tasks(self, user_id: Optional[str] = None, *, force_refresh: bool = False) -> list:
        return self._cached_list(cache_slots.TASKS, "/tasks", user_id, force_refresh)

    def get_task(self, task_id: str) -> dict:
        return self._request("GET", f"/tasks/{task_id}")

    def create_task(self, task: dict) -> dict:
        result = self._request("POST", "/tasks", json=task)
        self.cache.invalidate(cache_slots.TASKS)
        return result

    def update_task(self, task_id: str, fields: dict) -> dict:
        result = self._request("PUT", f"/tasks/{task_id}", json=fields)
        self.cache.invalidate(cache_slots.TASKS)
        return result

    def set_task_completion(self, task_id: str, completed: bool) -> dict:
        result = self._request(
            "POST", f"/tasks/{task_id}/completion", json={"completed": completed}
        )
        self.cache.invalidate(cache_slots.TASKS)
        if result.get("pointsChange"):
            self.cache.invalidate(cache_slots.USER_PROFILE)
        return result

    def reassign_task(self, task_id: str, email: str) -> dict:
        result = self._request(
            "POST", f"/tasks/{task_id}/reassign", json={"email": email}
        )
        self.cache.invalidate(cache_slots.TASKS)
        return result

    def delete_task(self, task_id: str) -> dict:
        result = self._request("DELETE", f"/tasks/{task_id}")
        self.cache.invalidate(cache_slots.TASKS)
        return result

    def list_subtasks(self, parent_task_id: Optional[str] = None) -> list:
        params = {"parentTaskId": parent_task_id} if parent_task_id else None
        return self._list("/subtasks", params)

    def get_subtask(self, subtask_id: str) -> dict:
        return self._request("GET", f"/subtasks/{subtask_id}")

    def create_subtask(self, subtask: dict) -> dict:
        result = self._request("POST", "/subtasks", json=subtask)
        self.cache.invalidate(cache_slots.TASKS)
        return result

    def update_subtask(self, subtask_id: str, fields: dict) -> dict:
        result = self._request("PUT", f"/subtasks/{subtask_id}", json=fields)
        self.cache.invalidate(cache_slots.TASKS)
        return result

    def delete_subtask(self, subtask_id: str) -> dict:
        result = self._request("DELETE", f"/subtasks/{subtask_id}")
        self.cache.invalidate(cache_slots.TASKS)
        return result

    # ------------------------------------------------------------------
    # Lists

    def list_lists(self, user_id: Optional[str] = None, *, force_refresh: bool = False) -> list:
        return self._cached_list(cache_slots.LISTS, "/lists", user_id, force_refresh)

    def get_list(self, list_id: str) -> dict:
        return self._request("GET", f"/lists/{list_id}")

    def create_list(self, name: str, user_id: str, task_ids: Optional[list] = None) -> dict:
        result = self._request(
            "POST",
            "/lists",
            json={"name": name, "userId": user_id, "taskIds": task_ids or []},
        )
        self.cache.invalidate(cache_slots.LISTS)
        return result

    def rename_list(self, list_id: str, name: str) -> dict:
        result = self._request("PUT", f"/lists/{list_id}", json={"name": name})
        self.cache.invalidate(cache_slots.LISTS)
        return result

    def add_task_to_list(self, list_id: str, task_id: str) -> dict:
        result = self._request(
            "POST", f"/lists/{list_id}/tasks", json={"taskId": task_id}
        )
        self.cache.invalidate(cache_slots.LISTS)
        return result

    def remove_task_from_list(self, list_id: str, task_id: str) -> dict:
        result = self._request("DELETE", f"/lists/{list_id}/tasks/{task_id}")
        self.cache.invalidate(cache_slots.LISTS)
        return result

    def delete_list(self, list_id: str) -> dict:
        result = self._request("DELETE", f"/lists/{list_id}")
        self.cache.invalidate(cache_slots.LISTS)
        return result

    # ------------------------------------------------------------------
    # Rewards

    def list_rewards(self, user_id: Optional[str] = None) -> list:
        params = {"userId": user_id} if user_id else None
        return self._list("/rewards", params)

    def get_reward(self, reward_id: str) -> dict:
        return self._request("GET", f"/rewards/{reward_id}")

    def create_reward(self, reward: dict) -> dict:
        return self._request("POST", "/rewards", json=reward)

    def update_reward(self, reward_id: str, fields: dict) -> dict:
        return self._request("PUT", f"/rewards/{reward_id}", json=fields)

    def share_reward(self, reward_id: str, user_ids: list) -> dict:
        return self._request(
            "POST", f"/rewards/{reward_id}/share", json={"userIds": list(user_ids)}
        )

    def redeem_reward(self, reward_id: str, user_id: str) -> dict:
        result = self._request(
            "POST", f"/rewards/{reward_id}/redeem", json={"userId": user_id}
        )
        self.cache.invalidate(cache_slots.USER_PROFILE)
        return result

    def delete_reward(self, reward_id: str) -> dict:
        return self._request("DELETE", f"/rewards/{reward_id}")

    # ------------------------------------------------------------------
    # Prizes

    def list_prizes(self, user_id: Optional[str] = None, *, force_refresh: bool = False) -> list:
        return self._cached_list(cache_slots.PRIZES, "/prizes", user_id, force_refresh)

    def get_prize(self, prize_id: str) -> dict:
        return self._request("GET", f"/prizes/{prize_id}")

    def create_prize(self, prize: dict) -> dict:
        result = self._request("POST", "/prizes", json=prize)
        self.cache.invalidate(cache_slots.PRIZES)
        return result

    def update_prize(self, prize_id: str, fields: dict) -> dict:
        result = self._request("PUT", f"/prizes/{prize_id}", json=fields)
        self.cache.invalidate(cache_slots.PRIZES)
        return result

    def purchase_prize(self, prize_id: str, user_id: str) -> dict:
        result = self._request(
            "POST", f"/prizes/{prize_id}/purchase", json={"userId": user_id}
        )
        self.cache.invalidate(cache_slots.USER_PROFILE)
        return result

    def delete_prize(self, prize_id: str) -> dict:
        result = self._request("DELETE", f"/prizes/{prize_id}")
        self.cache.invalidate(cache_slots.PRIZES)
        return result

    # ------------------------------------------------------------------
    # Images

    def delete_image(self, public_id: str) -> dict:
        return self._request(
            "DELETE", "/cloudinary/delete", json={"publicId": public_id}
        )
