from __future__ import annotations

import logging
from typing import Hashable

CellIdentity = tuple[Hashable, int]

logger = logging.getLogger(__name__)


class SelectionState:
    """Which category cell, if any, is currently clicked.

    Owned by one table and kept across render passes. Only clicks change it.
    """

    def __init__(self) -> None:
        self.active: CellIdentity | None = None

    @property
    def is_idle(self) -> bool:
        return self.active is None

    def is_active(self, cell: CellIdentity) -> bool:
        return self.active == cell

    def toggle(self, cell: CellIdentity) -> bool:
        if self.active == cell:
            logger.debug("selection cleared: %r", cell)
            self.active = None
            return False
        logger.debug("selection moved: %r -> %r", self.active, cell)
        self.active = cell
        return True

    def clear(self) -> None:
        self.active = None
