from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..common.datetime_utils import Clock
from ..core.actor import Actor
from .model import ActivityEntry
from .repository import ActivityRepository

log = logging.getLogger(__name__)


class ActivityLogService:
    """Fire-and-forget audit trail.

    A failed write is logged and dropped; it never fails the caller.
    """

    def __init__(self, activity: ActivityRepository, *, clock: Optional[Clock] = None):
        self._activity = activity
        self._clock = clock or Clock()

    def log(
        self,
        actor: Actor,
        action: str,
        module: str,
        description: str,
        *,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        entry = ActivityEntry(
            user_id=actor.user_id,
            role=actor.role.value,
            action=action,
            module=module,
            description=description,
            created_at=self._clock.now(),
            metadata=dict(metadata or {}),
        )
        try:
            self._activity.insert(entry)
            return True
        except Exception:
            log.exception("activity log write failed action=%s module=%s", action, module)
            return False
