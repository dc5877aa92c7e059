from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ActivityEntry:
    """Audit trail row: who did what, in which module."""

    user_id: Optional[int]
    role: str
    action: str
    module: str
    description: str
    created_at: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)
