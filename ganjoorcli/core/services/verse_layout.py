"""Verse layout engine.

Turns a flat, ordered verse sequence into layout groups using each verse's
position code as the only structural signal. Pure and synchronous: the same
input always yields the same groups.

Pairing is greedy, left to right, with one element of lookahead: a code-0
verse immediately followed by a code-1 verse forms a couplet; every other
verse stands alone under its own code's rule. Input order is authoritative
and text is passed through untouched.
"""

from typing import Iterable, Iterator, List, Optional, Sequence

from ganjoorcli.domain.models.catalog import Verse
from ganjoorcli.domain.models.layout import (
    CENTERED_DESCRIPTOR, COUPLET_DESCRIPTOR, POSITION_DESCRIPTORS,
    LayoutGroup, PositionDescriptor, VersePosition,
)


def describe_position(code: int) -> PositionDescriptor:
    """Rendering rule for a single verse carrying `code`.

    Hemistich codes (0, 1) that did not end up in a couplet, and any code
    outside the vocabulary, are drawn as a standalone centered verse.
    """
    try:
        position = VersePosition(code)
    except ValueError:
        return CENTERED_DESCRIPTOR
    descriptor = POSITION_DESCRIPTORS[position]
    if descriptor.arity != 1:
        return CENTERED_DESCRIPTOR
    return descriptor


def opens_couplet(current: Verse, following: Optional[Verse]) -> bool:
    """True when `current` and `following` form a couplet (codes 0 then 1)."""
    return (
        following is not None
        and current.position == VersePosition.RIGHT
        and following.position == VersePosition.LEFT
    )


def iter_layout_groups(verses: Iterable[Verse]) -> Iterator[LayoutGroup]:
    """Yields layout groups in input order.

    Args:
        verses: The poem's verses in the order they were received.

    Yields:
        One LayoutGroup per couplet or standalone verse.
    """
    sequence: Sequence[Verse] = verses if isinstance(verses, Sequence) else list(verses)
    cursor = 0
    index = 0
    number = 0

    while cursor < len(sequence):
        current = sequence[cursor]
        following = sequence[cursor + 1] if cursor + 1 < len(sequence) else None

        if opens_couplet(current, following):
            descriptor = COUPLET_DESCRIPTOR
            members = (current, following)
        else:
            descriptor = describe_position(current.position)
            members = (current,)

        group_number = None
        if descriptor.numbered:
            number += 1
            group_number = number

        yield LayoutGroup(
            kind=descriptor.kind,
            verses=members,
            alignment=descriptor.alignment,
            weight=descriptor.weight,
            index=index,
            number=group_number,
        )
        cursor += len(members)
        index += 1


def layout_verses(verses: Iterable[Verse]) -> List[LayoutGroup]:
    """Materializes iter_layout_groups into a list."""
    return list(iter_layout_groups(verses))


class VerseLayoutEngine:
    """Object wrapper so the engine can be injected like any other service."""

    def layout(self, verses: Iterable[Verse]) -> List[LayoutGroup]:
        return layout_verses(verses)
