from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import Role


@dataclass(frozen=True)
class Actor:
    """Identity of whoever triggered an operation.

    Supplied by the authentication layer; this package never looks it up.
    """

    user_id: Optional[int]
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role in (Role.ADMIN, Role.SYSTEM)


SYSTEM_ACTOR = Actor(user_id=None, role=Role.SYSTEM)
