"""
Key naming for the record store.

Every key is `:`-delimited; the first segment names the namespace. Prefix
scans rely on the delimiter never appearing inside a variable segment, so
each builder validates its inputs instead of trusting callers.

    user:<user_id>:<kind>
    feedback:<driver_id>:<created_ms>:<author_id>
    university:<university_id>

The `university:` namespace holds reference records provisioned out of band;
the API only reads it.
"""

from __future__ import annotations

from enum import Enum

DELIMITER = ":"

USER_NAMESPACE = "user"
FEEDBACK_NAMESPACE = "feedback"
UNIVERSITY_NAMESPACE = "university"


class InvalidKeySegment(ValueError):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field} {reason}")
        self.field = field
        self.reason = reason


class UserRecord(str, Enum):
    """
    Per-user singleton records. One value per (user, kind), overwritten on save.
    """

    UNIVERSITY = "university"
    LOCATION = "location"
    PICKUP_ROUTE = "pickup-route"


def _segment(value: object, *, field: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise InvalidKeySegment(field, "must not be empty")
    if DELIMITER in text:
        raise InvalidKeySegment(field, f"must not contain '{DELIMITER}'")
    return text


def is_valid_segment(value: object) -> bool:
    try:
        _segment(value, field="segment")
    except InvalidKeySegment:
        return False
    return True


def user_key(user_id: str, kind: UserRecord) -> str:
    return DELIMITER.join([USER_NAMESPACE, _segment(user_id, field="user_id"), UserRecord(kind).value])


def feedback_prefix(driver_id: str) -> str:
    return DELIMITER.join([FEEDBACK_NAMESPACE, _segment(driver_id, field="driver_id")]) + DELIMITER


def feedback_key(driver_id: str, created_ms: int, author_id: str) -> str:
    if int(created_ms) < 0:
        raise InvalidKeySegment("created_ms", "must not be negative")
    return feedback_prefix(driver_id) + DELIMITER.join(
        [str(int(created_ms)), _segment(author_id, field="author_id")]
    )


def university_key(university_id: str) -> str:
    """Provisioning key for a university reference record; no route writes it."""
    return DELIMITER.join([UNIVERSITY_NAMESPACE, _segment(university_id, field="university_id")])


def university_prefix() -> str:
    return UNIVERSITY_NAMESPACE + DELIMITER
