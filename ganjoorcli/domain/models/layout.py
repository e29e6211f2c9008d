"""Domain models for poem layout.

A verse's `position` code is the only structural signal the archive gives.
Each code maps to a PositionDescriptor; the layout engine turns a verse
sequence into LayoutGroups that a renderer can draw without re-deriving any
rules.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Optional, Tuple

from .catalog import Verse


class VersePosition(IntEnum):
    """Fixed vocabulary of structural position codes."""
    PARAGRAPH = -1       # Prose paragraph
    RIGHT = 0            # First hemistich of a couplet
    LEFT = 1             # Second hemistich of a couplet
    CENTERED_FIRST = 2   # Centered verse, first form
    CENTERED_SECOND = 3  # Centered verse, second form
    SINGLE = 4           # Free-verse single line
    COMMENT = 5          # Editorial annotation


class Alignment(str, Enum):
    SPLIT = "split"        # Two hemistichs side by side, right then left
    CENTER = "center"
    JUSTIFY = "justify"


class Weight(str, Enum):
    NORMAL = "normal"
    DIMMED = "dimmed"


class GroupKind(str, Enum):
    COUPLET = "couplet"
    CENTERED = "centered"
    FREE_VERSE = "free_verse"
    COMMENT = "comment"
    PARAGRAPH = "paragraph"


@dataclass(frozen=True)
class PositionDescriptor:
    """How verses carrying one position code are grouped and drawn."""
    kind: GroupKind
    arity: int
    alignment: Alignment
    weight: Weight
    numbered: bool


@dataclass(frozen=True)
class LayoutGroup:
    """One renderable unit: a couplet or a single standalone verse.

    Attributes:
        kind: Which rendering rule applies.
        verses: One verse, or two for a couplet (first hemistich first).
        alignment: Horizontal alignment for the renderer.
        weight: NORMAL, or DIMMED for annotations.
        index: 0-based position of the group in the output sequence.
        number: 1-based verse number, None for groups that are not numbered.
    """
    kind: GroupKind
    verses: Tuple[Verse, ...]
    alignment: Alignment
    weight: Weight
    index: int
    number: Optional[int] = None

    @property
    def texts(self) -> Tuple[str, ...]:
        return tuple(verse.text for verse in self.verses)


COUPLET_DESCRIPTOR = PositionDescriptor(GroupKind.COUPLET, 2, Alignment.SPLIT, Weight.NORMAL, True)
CENTERED_DESCRIPTOR = PositionDescriptor(GroupKind.CENTERED, 1, Alignment.CENTER, Weight.NORMAL, True)

POSITION_DESCRIPTORS: Dict[VersePosition, PositionDescriptor] = {
    VersePosition.RIGHT: COUPLET_DESCRIPTOR,
    VersePosition.LEFT: COUPLET_DESCRIPTOR,
    VersePosition.CENTERED_FIRST: CENTERED_DESCRIPTOR,
    VersePosition.CENTERED_SECOND: CENTERED_DESCRIPTOR,
    VersePosition.SINGLE: PositionDescriptor(GroupKind.FREE_VERSE, 1, Alignment.CENTER, Weight.NORMAL, True),
    VersePosition.COMMENT: PositionDescriptor(GroupKind.COMMENT, 1, Alignment.CENTER, Weight.DIMMED, False),
    VersePosition.PARAGRAPH: PositionDescriptor(GroupKind.PARAGRAPH, 1, Alignment.JUSTIFY, Weight.NORMAL, True),
}
