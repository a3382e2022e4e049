"""
Helpers shared by the document store implementations.

Filters and updates use a small subset of the MongoDB dialect so the same
request payloads work against every backend.
"""

from __future__ import annotations

import copy
import os
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from bson import ObjectId

UPDATE_OPERATORS = ("$set", "$inc", "$push", "$addToSet", "$pull", "$unset")


class InvalidDocumentId(ValueError):
    """Raised when a document id is not valid for the backing store."""


class InvalidUpdate(ValueError):
    """Raised when an update payload cannot be applied."""


def new_document_id() -> str:
    # Same shape as a MongoDB ObjectId: 4-byte timestamp + 8 random bytes.
    return f"{int(time.time()):08x}{os.urandom(8).hex()}"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _field_matches(stored: Any, expected: Any) -> bool:
    if stored == expected:
        return True
    if isinstance(stored, list) and not isinstance(expected, list):
        return expected in stored
    return False


def matches(document: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
    """Return True when ``document`` satisfies the equality ``filters``."""
    if not filters:
        return True
    for key, expected in filters.items():
        if key == "$or":
            if not any(matches(document, sub) for sub in expected):
                return False
            continue
        if not _field_matches(document.get(key), expected):
            return False
    return True


def normalize_update(body: Dict[str, Any], *, allow_operators: bool = True) -> Dict[str, Any]:
    """
    Turn a request body into an operator update.

    Plain field bodies become ``{"$set": body}``. Operator bodies are checked
    against UPDATE_OPERATORS.
    """
    if not isinstance(body, dict) or not body:
        raise InvalidUpdate("Update body must be a non-empty object")

    operator_keys = [k for k in body if k.startswith("$")]
    if not operator_keys:
        update = {"$set": dict(body)}
    elif len(operator_keys) != len(body):
        raise InvalidUpdate("Cannot mix update operators and plain fields")
    elif not allow_operators:
        raise InvalidUpdate("Update operators are not accepted here")
    else:
        update = {}
        for op, fields in body.items():
            if op not in UPDATE_OPERATORS:
                raise InvalidUpdate(f"Unsupported update operator: {op}")
            if not isinstance(fields, dict):
                raise InvalidUpdate(f"{op} expects an object")
            update[op] = dict(fields)

    for fields in update.values():
        if "_id" in fields:
            raise InvalidUpdate("_id cannot be modified")
    return update


def apply_update(document: Dict[str, Any], update: Dict[str, Any]) -> bool:
    """Apply ``update`` to ``document`` in place. Returns whether it changed."""
    before = copy.deepcopy(document)

    for field, value in update.get("$set", {}).items():
        document[field] = value

    for field in update.get("$unset", {}):
        document.pop(field, None)

    for field, amount in update.get("$inc", {}).items():
        current = document.get(field, 0)
        if isinstance(current, bool) or not isinstance(current, (int, float)):
            raise InvalidUpdate(f"Cannot increment non-numeric field: {field}")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise InvalidUpdate(f"Increment for {field} must be a number")
        document[field] = current + amount

    for field, value in update.get("$push", {}).items():
        target = _list_field(document, field)
        target.append(value)

    for field, value in update.get("$addToSet", {}).items():
        target = _list_field(document, field)
        if value not in target:
            target.append(value)

    for field, value in update.get("$pull", {}).items():
        if field in document:
            target = _list_field(document, field)
            document[field] = [item for item in target if item != value]

    return document != before


def _list_field(document: Dict[str, Any], field: str) -> list:
    target = document.setdefault(field, [])
    if not isinstance(target, list):
        raise InvalidUpdate(f"Field is not an array: {field}")
    return target


def serialize(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Make a stored document JSON friendly (ObjectId and datetime to str)."""
    if not document:
        return document
    return {key: _serialize_value(value) for key, value in document.items()}


def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def serialize_all(documents: Iterable[Dict[str, Any]]) -> list[Dict[str, Any]]:
    return [serialize(doc) for doc in documents]
