"""Member-set differ: find members present in one version but not the other.

Members are paired by structural equality, never by identity, so two units
read from different files (or by different readers) can be compared. Each
challenger member pairs with at most one baseline member; the first
structural match in challenger declaration order wins.

Output order: baseline members that found no counterpart are yielded in
baseline declaration order, with the differences inside a matched type
emitted inline at that type's position. Challenger members left over are
yielded last, in challenger declaration order.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from pubdiff.engine.descriptors import (
    EventDescriptor,
    Member,
    PropertyDescriptor,
    TypeDescriptor,
    TypeRef,
    UnitDescriptor,
)
from pubdiff.engine.equality import have_same_name, members_equal
from pubdiff.engine.errors import UnsupportedMemberError
from pubdiff.engine.visibility import visible_members, visible_types

logger = logging.getLogger(__name__)


class Change(enum.StrEnum):
    REMOVED = "removed"
    ADDED = "added"


@dataclass(frozen=True)
class Difference:
    """One unmatched member and the type it was found on (``None`` at unit level)."""
    change: Change
    member: Member
    owner: TypeRef | None = None

    @property
    def symbol(self) -> str:
        return "-" if self.change == Change.REMOVED else "+"


def compare(baseline, challenger) -> Iterator[Difference]:
    """Compare two units, two types, or two member sequences."""
    if isinstance(baseline, UnitDescriptor) and isinstance(challenger, UnitDescriptor):
        return compare_units(baseline, challenger)
    if isinstance(baseline, TypeDescriptor) and isinstance(challenger, TypeDescriptor):
        return compare_types(baseline, challenger)
    if isinstance(baseline, (UnitDescriptor, TypeDescriptor)):
        raise UnsupportedMemberError("challenger", challenger)
    if isinstance(challenger, (UnitDescriptor, TypeDescriptor)):
        raise UnsupportedMemberError("baseline", baseline)
    return compare_members(baseline, challenger)


def compare_units(baseline: UnitDescriptor, challenger: UnitDescriptor) -> Iterator[Difference]:
    """Compare the visible top-level types of two units."""
    return _compare_sequence(
        visible_types(baseline),
        visible_types(challenger),
        owners=(None, None),
        units=(baseline, challenger),
    )


def compare_types(
    baseline: TypeDescriptor,
    challenger: TypeDescriptor,
    *,
    baseline_unit: UnitDescriptor | None = None,
    challenger_unit: UnitDescriptor | None = None,
) -> Iterator[Difference]:
    """Compare the visible member graphs of two types with the same name.

    Types with different structural names yield nothing: there is no member
    graph in common to compare.
    """
    if not have_same_name(baseline.ref, challenger.ref):
        return iter(())
    return _compare_sequence(
        visible_members(baseline, baseline_unit),
        visible_members(challenger, challenger_unit),
        owners=(baseline.ref, challenger.ref),
        units=(baseline_unit, challenger_unit),
    )


def compare_members(
    baseline: Iterable[Member],
    challenger: Iterable[Member],
    *,
    owners: tuple[TypeRef | None, TypeRef | None] = (None, None),
) -> Iterator[Difference]:
    """Compare two already-filtered member sequences."""
    return _compare_sequence(list(baseline), list(challenger), owners=owners, units=(None, None))


def _take_first(remaining: dict[int, Member], predicate) -> Member | None:
    for index, candidate in remaining.items():
        if predicate(candidate):
            del remaining[index]
            return candidate
    return None


def _compare_sequence(
    baseline: list[Member],
    challenger: list[Member],
    *,
    owners: tuple[TypeRef | None, TypeRef | None],
    units: tuple[UnitDescriptor | None, UnitDescriptor | None],
) -> Iterator[Difference]:
    baseline_owner, challenger_owner = owners
    baseline_unit, challenger_unit = units
    # Position-keyed so structurally identical members stay distinct and ordered.
    remaining: dict[int, Member] = dict(enumerate(challenger))

    for member in baseline:
        if isinstance(member, TypeDescriptor):
            found = _take_first(
                remaining,
                lambda c: isinstance(c, TypeDescriptor) and have_same_name(member.ref, c.ref),
            )
            if found is None:
                yield _difference(Change.REMOVED, member, baseline_owner)
                continue
            yield from compare_types(
                member, found,
                baseline_unit=baseline_unit, challenger_unit=challenger_unit,
            )
        elif isinstance(member, PropertyDescriptor):
            # Accessors show up as methods of the type; the property itself never does.
            _take_first(
                remaining,
                lambda c: isinstance(c, PropertyDescriptor) and c.name == member.name,
            )
        elif isinstance(member, EventDescriptor):
            _take_first(
                remaining,
                lambda c: isinstance(c, EventDescriptor) and c.name == member.name,
            )
        else:
            found = _take_first(remaining, lambda c: members_equal(member, c))
            if found is None:
                yield _difference(Change.REMOVED, member, baseline_owner)

    for member in remaining.values():
        if isinstance(member, (PropertyDescriptor, EventDescriptor)):
            continue
        yield _difference(Change.ADDED, member, challenger_owner)


def _difference(change: Change, member: Member, owner: TypeRef | None) -> Difference:
    logger.debug("Difference (%s): %s on %s", change, getattr(member, "name", member), owner)
    return Difference(change=change, member=member, owner=owner)


def summarize(differences: Iterable[Difference]) -> dict[str, int]:
    """Count differences by change kind."""
    counts = {Change.REMOVED.value: 0, Change.ADDED.value: 0}
    for diff in differences:
        counts[diff.change.value] += 1
    counts["total"] = counts[Change.REMOVED.value] + counts[Change.ADDED.value]
    return counts


__all__ = [
    "Change",
    "Difference",
    "compare",
    "compare_members",
    "compare_types",
    "compare_units",
    "summarize",
]
