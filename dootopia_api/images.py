"""
Image host abstraction for Cloudinary and in-memory testing.

Uploads happen directly from the mobile client; the API only proxies
deletions because those need the account's API secret.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

import cloudinary
import cloudinary.uploader


class ImageHost(Protocol):
    """Defines the operations the API needs from the image host."""

    def destroy(self, public_id: str) -> dict:
        ...


@dataclass
class InMemoryImageHost:
    """Test double for image host interactions."""

    stored_ids: set[str] = field(default_factory=set)

    def add(self, public_id: str) -> None:
        self.stored_ids.add(public_id)

    def destroy(self, public_id: str) -> dict:
        if public_id in self.stored_ids:
            self.stored_ids.discard(public_id)
            return {"result": "ok"}
        return {"result": "not found"}


@dataclass
class CloudinaryImageHost:
    """
    Deletes images through the Cloudinary SDK.
    """

    cloud_name: str
    api_key: str
    api_secret: str

    def __post_init__(self):
        cloudinary.config(
            cloud_name=self.cloud_name,
            api_key=self.api_key,
            api_secret=self.api_secret,
            secure=True,
        )

    def destroy(self, public_id: str) -> dict:
        return cloudinary.uploader.destroy(public_id)
