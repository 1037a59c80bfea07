"""
Driver feedback: authenticated submission, public listing.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from auth.schemas import Identity
from core import keys
from core.kv_store import KVStore

from . import repository, schemas

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def submit_feedback(
    store: KVStore,
    identity: Identity,
    payload: schemas.SubmitFeedbackRequest,
    *,
    now: datetime | None = None,
) -> dict:
    created = now or _utc_now()
    # Key embeds driver, millisecond timestamp and author, so submissions never overwrite each other.
    key = await repository.insert_feedback(
        store,
        driver_id=str(payload.driver_id),
        author_id=identity.id,
        created_ms=int(created.timestamp()) * 1000 + created.microsecond // 1000,
        record={
            "driver_id": str(payload.driver_id),
            "user_id": identity.id,
            "user_email": identity.email,
            "rating": payload.rating,
            "comment": payload.comment or None,
            "created_at": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        },
    )
    logger.info("feedback_submitted key=%s rating=%s", key, payload.rating)
    return {"success": True, "message": "Feedback submitted successfully"}


async def list_driver_feedback(store: KVStore, driver_id: str) -> dict:
    # No submission can be stored under an id that is not a valid key segment.
    if not keys.is_valid_segment(driver_id):
        return {"feedback": []}
    rows = await repository.list_feedback_for_driver(store, driver_id.strip())
    return {"feedback": rows}
