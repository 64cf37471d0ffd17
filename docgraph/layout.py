"""
Deterministic radial layout. Every group (pages, AI keywords, consulting insights,
taxonomy entities) sits on its own ring; a node's position depends only on its
index and the size of its group.
"""
from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from docgraph.models import Node


def ring_position(index: int, count: int, radius: float) -> Tuple[float, float]:
    """
    (x, y) of slot `index` out of `count` evenly spaced slots on a ring.

    Args:
        index (int): 0-based slot.
        count (int): Number of slots on the ring.
        radius (float): Ring radius.

    Returns:
        Tuple[float, float]: Cartesian coordinates.
    """
    if count <= 0:
        raise ValueError("count must be positive")
    angle = 2 * math.pi * index / count
    return math.cos(angle) * radius, math.sin(angle) * radius


def layout_pages(pages: Sequence[Node], radius: float, z_step: float) -> List[Node]:
    """Pages on a ring, z rising with the page position (first page at z_step)."""
    n = len(pages)
    for i, node in enumerate(pages):
        node.x, node.y = ring_position(i, n, radius)
        node.z = (i + 1) * z_step
    return list(pages)


def layout_entities(entities: Sequence[Node], radius: float, z_base: float, z_step: float) -> List[Node]:
    """Entities on a ring, z offset by a constant step per index."""
    n = len(entities)
    for i, node in enumerate(entities):
        node.x, node.y = ring_position(i, n, radius)
        node.z = z_base + i * z_step
    return list(entities)


def grid_position(index: int, columns: int = 10, spacing: float = 80.0) -> Tuple[float, float, float]:
    """Seed ontology grid: rows of `columns` nodes, three z layers."""
    x = (index % columns) * spacing - columns * spacing / 2
    y = (index // columns) * spacing - 200.0
    z = (index % 3) * 50.0
    return x, y, z
