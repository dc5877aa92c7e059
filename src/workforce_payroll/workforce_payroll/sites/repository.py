from __future__ import annotations

from typing import Optional, Protocol

from .model import ConstructionSite


class SiteRepository(Protocol):
    def get_by_id(self, site_id: int) -> Optional[ConstructionSite]:
        raise NotImplementedError
