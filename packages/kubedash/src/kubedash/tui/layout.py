"""Recursive, data-described partition of screen areas into widget slots.

A layout is a tree of :class:`Leaf` (a widget slot) and :class:`Split`
(a direction plus weighted children).  Descriptions are plain data: they can
be generated by a pure function, validated once, and serialized.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence, Union


class LayoutError(ValueError):
    """A layout description is invalid."""


class Direction(enum.Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    def toggled(self) -> Direction:
        if self is Direction.HORIZONTAL:
            return Direction.VERTICAL
        return Direction.HORIZONTAL


@dataclass(frozen=True)
class Rect:
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom

    def inner(self, margin: int = 1) -> Rect:
        return Rect(
            self.x + margin,
            self.y + margin,
            max(0, self.width - 2 * margin),
            max(0, self.height - 2 * margin),
        )

    def centered(self, percent_x: int, percent_y: int) -> Rect:
        """Sub-area of the given size percentages centered in this one."""
        width = self.width * percent_x // 100
        height = self.height * percent_y // 100
        return Rect(
            self.x + (self.width - width) // 2,
            self.y + (self.height - height) // 2,
            width,
            height,
        )


@dataclass(frozen=True)
class Leaf:
    slot: int


@dataclass(frozen=True)
class Split:
    direction: Direction
    children: tuple[tuple[int, LayoutNode], ...]


LayoutNode = Union[Leaf, Split]


class Placeable(Protocol):
    def update_area(self, area: Rect) -> None: ...


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def iter_slots(node: LayoutNode) -> list[int]:
    if isinstance(node, Leaf):
        return [node.slot]
    slots: list[int] = []
    for _weight, child in node.children:
        slots.extend(iter_slots(child))
    return slots


def validate(node: LayoutNode, slot_count: int) -> None:
    """Raise :class:`LayoutError` if *node* does not fit *slot_count* widgets."""
    if isinstance(node, Split):
        if not node.children:
            raise LayoutError("split has no children")
        for weight, child in node.children:
            if weight < 0:
                raise LayoutError(f"negative weight {weight}")
            validate(child, slot_count)
        return
    if not isinstance(node, Leaf):
        raise LayoutError(f"unknown layout node {node!r}")
    if not 0 <= node.slot < slot_count:
        raise LayoutError(f"slot {node.slot} out of range for {slot_count} widgets")


# ---------------------------------------------------------------------------
# Splitting
# ---------------------------------------------------------------------------


def _distribute(length: int, weights: Sequence[int]) -> list[int]:
    """Split *length* proportionally to *weights*; sizes always sum to it."""
    total = sum(weights)
    if total <= 0:
        weights = [1] * len(weights)
        total = len(weights)
    sizes: list[int] = []
    cumulative = 0
    previous_edge = 0
    for weight in weights:
        cumulative += weight
        edge = cumulative * length // total
        sizes.append(edge - previous_edge)
        previous_edge = edge
    return sizes


def split(node: LayoutNode, area: Rect) -> list[Rect]:
    """Areas of the root node's direct children (the area itself for a leaf)."""
    if isinstance(node, Leaf):
        return [area]
    weights = [weight for weight, _child in node.children]
    areas: list[Rect] = []
    if node.direction is Direction.HORIZONTAL:
        x = area.x
        for size in _distribute(area.width, weights):
            areas.append(Rect(x, area.y, size, area.height))
            x += size
    else:
        y = area.y
        for size in _distribute(area.height, weights):
            areas.append(Rect(area.x, y, area.width, size))
            y += size
    return areas


def leaf_areas(node: LayoutNode, area: Rect) -> dict[int, Rect]:
    """Map every leaf slot of *node* to its area inside *area*."""
    if isinstance(node, Leaf):
        return {node.slot: area}
    result: dict[int, Rect] = {}
    for (_weight, child), child_area in zip(node.children, split(node, area)):
        result.update(leaf_areas(child, child_area))
    return result


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def layout_to_dict(node: LayoutNode) -> dict[str, Any]:
    if isinstance(node, Leaf):
        return {"slot": node.slot}
    return {
        "direction": node.direction.value,
        "children": [
            {"weight": weight, "node": layout_to_dict(child)}
            for weight, child in node.children
        ],
    }


def layout_from_dict(data: dict[str, Any]) -> LayoutNode:
    try:
        if "slot" in data:
            return Leaf(int(data["slot"]))
        return Split(
            Direction(data["direction"]),
            tuple(
                (int(child["weight"]), layout_from_dict(child["node"]))
                for child in data["children"]
            ),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise LayoutError(f"invalid layout description: {exc}") from exc


# ---------------------------------------------------------------------------
# TabLayout
# ---------------------------------------------------------------------------


class TabLayout:
    """Layout of one tab, regenerated from a pure description function."""

    def __init__(
        self,
        describe: Callable[[Direction], LayoutNode],
        slot_count: int,
        direction: Direction = Direction.VERTICAL,
    ) -> None:
        self._describe = describe
        self.slot_count = slot_count
        self.direction = direction
        self.node = describe(direction)
        validate(self.node, slot_count)
        # The other orientation must be valid as well, or toggling would fail later.
        validate(describe(direction.toggled()), slot_count)

    def split(self, area: Rect) -> list[Rect]:
        return split(self.node, area)

    def assign(self, area: Rect, widgets: Sequence[Placeable]) -> None:
        for slot, slot_area in leaf_areas(self.node, area).items():
            widgets[slot].update_area(slot_area)

    def toggle_direction(self, area: Rect, widgets: Sequence[Placeable]) -> None:
        self.direction = self.direction.toggled()
        self.node = self._describe(self.direction)
        self.assign(area, widgets)
