"""Canvas layout repair.

Positions have no execution meaning, so this stage only intervenes when
two nodes would be drawn on top of each other. A layout the LLM got right
is left exactly as it was.
"""
import math
from typing import Union

import structlog
from pydantic import BaseModel, ConfigDict, Field

logger = structlog.get_logger()

Number = Union[int, float]


class LayoutConfig(BaseModel):
    """Grid used to re-place colliding nodes."""

    model_config = ConfigDict(frozen=True)

    origin_x: int = 250
    origin_y: int = 300
    column_gap: int = Field(350, ge=1)
    row_gap: int = Field(220, ge=1)
    columns: int = Field(5, ge=1)
    max_attempts: int = Field(200, ge=1)

    def slot(self, index: int) -> tuple[int, int]:
        """Coordinates of grid slot ``index``, filled row by row."""
        column = index % self.columns
        row = index // self.columns
        return (
            self.origin_x + column * self.column_gap,
            self.origin_y + row * self.row_gap,
        )


def placeholder_position(index: int) -> list[int]:
    """Left-to-right staggered default for a node without a usable position."""
    return [250 + index * 250, 300]


def round_half_up(value: Number) -> int:
    return int(math.floor(value + 0.5))


def position_key(position: list[Number]) -> tuple[int, int]:
    return round_half_up(position[0]), round_half_up(position[1])


def has_collision(positions: list[list[Number]]) -> bool:
    """True if any two positions round to the same point."""
    keys = [position_key(position) for position in positions]
    return len(set(keys)) != len(keys)


def repair_layout(
    positions: list[list[Number]],
    config: LayoutConfig,
) -> tuple[list[list[Number]], bool]:
    """Return non-overlapping positions and whether anything was moved.

    Nodes are visited in order. Each keeps its own (rounded) spot if it is
    still free; otherwise grid slots are probed from the node's own index
    onwards. Never raises.
    """
    if not has_collision(positions):
        return [list(position) for position in positions], False

    # n nodes occupy at most n - 1 slots when one is being placed, so n + 1
    # probes always find a free one.
    limit = max(config.max_attempts, len(positions) + 1)

    used: set[tuple[int, int]] = set()
    repaired: list[list[Number]] = []
    moved = 0

    for index, position in enumerate(positions):
        key = position_key(position)
        if key in used:
            moved += 1
            for attempt in range(limit):
                key = config.slot(index + attempt)
                if key not in used:
                    break
        used.add(key)
        repaired.append([key[0], key[1]])

    logger.info("layout_repaired", node_count=len(positions), nodes_moved=moved)
    return repaired, True
