"""
Home Page Design Variants

The home page ships in four visual designs. Visitors switch between them with
the floating palette button, the number keys 1-4, D / ] (next), [ (previous)
and P (toggle the picker). The selection is remembered in the browser and
mirrored into a cookie so the server renders the chosen variant.

This module holds the variant enumeration and the selector state machine.
The browser script consumes ``DesignSelector.keymap()`` so both sides agree
on the shortcuts.

Example usage:
    from core.design import DesignSelector, DesignVariant

    selector = DesignSelector()
    selector.handle_key("]")
    assert selector.current is DesignVariant.B
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class DesignVariant(str, Enum):
    """Enumeration of home page designs."""
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class CycleDirection(str, Enum):
    NEXT = "next"
    PREV = "prev"


DESIGN_ORDER: List[DesignVariant] = [DesignVariant.A, DesignVariant.B, DesignVariant.C, DesignVariant.D]
DEFAULT_DESIGN = DesignVariant.A

# Cookie and localStorage key
DESIGN_STORAGE_KEY = "pivtools-design"


def parse_design(value: Optional[str]) -> Optional[DesignVariant]:
    """
    Parse a design id case-insensitively.

    Returns:
        The matching variant, or None for empty or unknown values
    """
    if not value:
        return None
    try:
        return DesignVariant(value.strip().upper())
    except ValueError:
        return None


def cycle_design(current: DesignVariant, direction: CycleDirection = CycleDirection.NEXT) -> DesignVariant:
    """
    Step through DESIGN_ORDER, wrapping at both ends.

    Example:
        >>> cycle_design(DesignVariant.D).value
        'A'
        >>> cycle_design(DesignVariant.A, CycleDirection.PREV).value
        'D'
    """
    index = DESIGN_ORDER.index(DesignVariant(current))
    step = 1 if CycleDirection(direction) is CycleDirection.NEXT else -1
    return DESIGN_ORDER[(index + step) % len(DESIGN_ORDER)]


def resolve_design(query_value: Optional[str] = None, stored_value: Optional[str] = None) -> DesignVariant:
    """Pick the variant to render: explicit query first, then the stored choice, then the default."""
    return parse_design(query_value) or parse_design(stored_value) or DEFAULT_DESIGN


@dataclass
class DesignSelector:
    """
    Selector state: the active design and whether the picker modal is open.

    handle_key() mirrors the browser shortcuts and returns True when the key
    was consumed.
    """
    current: DesignVariant = DEFAULT_DESIGN
    is_open: bool = False

    def select(self, design: DesignVariant) -> DesignVariant:
        """Choose a design from the picker; closes the modal."""
        self.current = DesignVariant(design)
        self.is_open = False
        return self.current

    def cycle(self, direction: CycleDirection = CycleDirection.NEXT) -> DesignVariant:
        self.current = cycle_design(self.current, direction)
        return self.current

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def toggle(self) -> bool:
        self.is_open = not self.is_open
        return self.is_open

    def handle_key(self, key: str, typing: bool = False) -> bool:
        """
        Apply a keyboard shortcut.

        Args:
            key: KeyboardEvent.key value ("1", "d", "]", "Escape", ...)
            typing: True when focus is in an input or textarea

        Returns:
            True if the key changed selector state
        """
        if typing or not key:
            return False

        if len(key) == 1 and "1" <= key <= str(len(DESIGN_ORDER)):
            self.current = DESIGN_ORDER[int(key) - 1]
            return True

        if key in ("d", "D", "]"):
            self.cycle(CycleDirection.NEXT)
            return True

        if key == "[":
            self.cycle(CycleDirection.PREV)
            return True

        if key == "Escape":
            if self.is_open:
                self.close()
                return True
            return False

        if key in ("p", "P"):
            self.toggle()
            return True

        return False

    @staticmethod
    def keymap() -> Dict[str, object]:
        """Shortcut table serialized into the page for the browser script."""
        return {
            "order": [design.value for design in DESIGN_ORDER],
            "select": {str(i + 1): design.value for i, design in enumerate(DESIGN_ORDER)},
            "next": ["d", "D", "]"],
            "prev": ["["],
            "toggle": ["p", "P"],
            "close": ["Escape"],
            "storageKey": DESIGN_STORAGE_KEY,
        }
