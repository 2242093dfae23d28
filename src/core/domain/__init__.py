"""
Domain models and value objects.

Contains the inverse slot tagged union and the cell diagnostic snapshot.
"""

from src.core.domain.cell_snapshot import CellSnapshot
from src.core.domain.inverse_state import (
    SINGULAR,
    UNSET,
    InverseSlot,
    InverseStatus,
)

__all__ = [
    # Inverse slot
    "InverseStatus",
    "InverseSlot",
    "UNSET",
    "SINGULAR",
    # Snapshot
    "CellSnapshot",
]
