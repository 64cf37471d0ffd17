import math
import os

os.environ["ANALYZER_USE_LLM"] = "false"

import pytest

from docgraph.layout import grid_position, layout_entities, layout_pages, ring_position
from docgraph.models import Node
from docgraph.relations import (
    CONTAINS_AI_CONCEPT,
    GENERATES_INSIGHT,
    NEXT_PAGE,
    build_relationships,
    fan_edges,
    sequential_edges,
)


def _nodes(prefix, count, node_type="pdf_page_image"):
    return [Node(id=f"{prefix}-{i}", label=f"{prefix} {i}", type=node_type) for i in range(count)]


def test_ring_position_angles_and_radius():
    count, radius = 7, 600.0
    for i in range(count):
        x, y = ring_position(i, count, radius)
        assert math.hypot(x, y) == pytest.approx(radius)
        assert math.atan2(y, x) % (2 * math.pi) == pytest.approx((2 * math.pi * i / count) % (2 * math.pi), abs=1e-9)


def test_ring_position_rejects_empty_group():
    with pytest.raises(ValueError):
        ring_position(0, 0, 100.0)


def test_layout_pages_sets_rising_z():
    pages = layout_pages(_nodes("p", 4), radius=600.0, z_step=40.0)
    assert [p.z for p in pages] == [40.0, 80.0, 120.0, 160.0]
    assert pages[0].x == pytest.approx(600.0)
    assert pages[0].y == pytest.approx(0.0)


def test_layout_entities_is_deterministic():
    first = [(n.x, n.y, n.z) for n in layout_entities(_nodes("k", 5, "ai_keyword"), 1000.0, 200.0, 40.0)]
    second = [(n.x, n.y, n.z) for n in layout_entities(_nodes("k", 5, "ai_keyword"), 1000.0, 200.0, 40.0)]
    assert first == second
    assert [z for _, _, z in first] == [200.0, 240.0, 280.0, 320.0, 360.0]


def test_grid_position():
    assert grid_position(0) == (-400.0, -200.0, 0.0)
    assert grid_position(13) == (-160.0, -120.0, 50.0)


@pytest.mark.parametrize("count", [1, 2, 5, 28])
def test_sequential_edges_form_one_path(count):
    pages = _nodes("p", count)
    edges = sequential_edges(pages)
    assert len(edges) == count - 1
    assert all(e.type == NEXT_PAGE and e.strength == 1.0 and e.evidence == "순차적 페이지" for e in edges)
    # each page appears once as source and once as target, except the ends
    assert [e.source for e in edges] == [p.id for p in pages[:-1]]
    assert [e.target for e in edges] == [p.id for p in pages[1:]]


def test_fan_edges_wrap_around_pages():
    pages = _nodes("p", 3)
    keywords = _nodes("k", 7, "ai_keyword")
    edges = fan_edges(pages, keywords, CONTAINS_AI_CONCEPT, 0.8, "AI 개념 추출")
    assert [e.source for e in edges] == ["p-0", "p-1", "p-2", "p-0", "p-1", "p-2", "p-0"]
    assert [e.target for e in edges] == [k.id for k in keywords]


def test_no_pages_means_no_cross_edges():
    assert build_relationships([], _nodes("k", 3, "ai_keyword"), _nodes("c", 2, "consulting_insight")) == []


def test_build_relationships_counts_and_strengths():
    pages = _nodes("p", 5)
    keywords = _nodes("k", 11, "ai_keyword")
    insights = _nodes("c", 11, "consulting_insight")
    edges = build_relationships(pages, keywords, insights, insight_strength=0.75)
    assert len(edges) == 4 + 11 + 11
    assert {e.strength for e in edges if e.type == CONTAINS_AI_CONCEPT} == {0.8}
    assert {e.strength for e in edges if e.type == GENERATES_INSIGHT} == {0.75}
    assert {e.evidence for e in edges if e.type == GENERATES_INSIGHT} == {"컨설팅 인사이트 도출"}
