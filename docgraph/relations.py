"""Typed, weighted relationships between pages and the entities derived from them."""
from __future__ import annotations

from typing import List, Sequence

from docgraph.models import Edge, Node

NEXT_PAGE = "next_page"
CONTAINS_AI_CONCEPT = "contains_ai_concept"
GENERATES_INSIGHT = "generates_insight"

NEXT_PAGE_EVIDENCE = "순차적 페이지"
AI_CONCEPT_EVIDENCE = "AI 개념 추출"
INSIGHT_EVIDENCE = "컨설팅 인사이트 도출"


def sequential_edges(pages: Sequence[Node]) -> List[Edge]:
    """`next_page` edges along the page order: N pages give N-1 edges."""
    return [
        Edge(source=a.id, target=b.id, type=NEXT_PAGE, strength=1.0, evidence=NEXT_PAGE_EVIDENCE)
        for a, b in zip(pages, pages[1:])
    ]


def fan_edges(pages: Sequence[Node], entities: Sequence[Node], relation: str,
              strength: float, evidence: str) -> List[Edge]:
    """
    Link entity i from page i % len(pages). No pages means no edges.

    Args:
        pages: Page nodes in page order.
        entities: Entity nodes in synthesis order.
        relation (str): Edge type.
        strength (float): Weight for every edge.
        evidence (str): Literal evidence string.

    Returns:
        List[Edge]: One edge per entity.
    """
    if not pages:
        return []
    return [
        Edge(source=pages[i % len(pages)].id, target=entity.id, type=relation,
             strength=strength, evidence=evidence)
        for i, entity in enumerate(entities)
    ]


def build_relationships(pages: Sequence[Node], keywords: Sequence[Node], insights: Sequence[Node],
                        keyword_strength: float = 0.8, insight_strength: float = 0.7) -> List[Edge]:
    """Sequential page edges, then page→keyword edges, then page→insight edges."""
    edges = sequential_edges(pages)
    edges += fan_edges(pages, keywords, CONTAINS_AI_CONCEPT, keyword_strength, AI_CONCEPT_EVIDENCE)
    edges += fan_edges(pages, insights, GENERATES_INSIGHT, insight_strength, INSIGHT_EVIDENCE)
    return edges
