"""Builds AI keyword and consulting insight nodes from a profile's candidate lists."""
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from docgraph.models import Node, PageRecord, node_color
from docgraph.profiles import MAX_DERIVED_CANDIDATES, DocumentProfile


def dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for item in items:
        key = item.strip().lower()
        if key and key not in seen:
            seen.add(key)
            out.append(item.strip())
    return out


def candidate_lists(profile: DocumentProfile, records: Sequence[PageRecord]) -> Tuple[List[str], List[str]]:
    """
    Returns (ai_keywords, consulting_insights) for an upload.

    Profiles with fixed lists return them unchanged. Profiles that derive their
    candidates collect them from the analysed pages, in page order, capped at
    MAX_DERIVED_CANDIDATES, and use the profile lists when nothing was found.
    """
    if not profile.derive_candidates:
        return list(profile.ai_keywords), list(profile.consulting_insights)

    ai = dedupe(k for r in records for k in r.ai_keywords)[:MAX_DERIVED_CANDIDATES]
    insights = dedupe(k for r in records for k in r.consulting_insights)[:MAX_DERIVED_CANDIDATES]
    return (ai or list(profile.ai_keywords)), (insights or list(profile.consulting_insights))


def keyword_nodes(keywords: Sequence[str], token: str, extracted_from: str,
                  document_id: str) -> List[Node]:
    """One `ai_keyword` node per keyword; coordinates are left to the layout."""
    nodes: List[Node] = []
    for index, keyword in enumerate(keywords):
        nodes.append(Node(
            id=f"ai-keyword-{token}-{index}",
            label=keyword,
            type="ai_keyword",
            category="ai_concept",
            color=node_color("ai_keyword"),
            size=8,
            is_new=True,
            document_id=document_id,
            confidence=round(0.9 + (index % 10) * 0.009, 3),
            metadata={
                "keyword": keyword,
                "category": "AI Technology",
                "relevance": "High",
                "extractedFrom": extracted_from,
            },
        ))
    return nodes


def insight_nodes(insights: Sequence[str], token: str, extracted_from: str,
                  document_id: str, impact: str = "Medium") -> List[Node]:
    """One `consulting_insight` node per insight."""
    nodes: List[Node] = []
    for index, insight in enumerate(insights):
        nodes.append(Node(
            id=f"consulting-{token}-{index}",
            label=insight,
            type="consulting_insight",
            category="business_insight",
            color=node_color("consulting_insight"),
            size=10,
            is_new=True,
            document_id=document_id,
            confidence=round(0.85 + (index % 10) * 0.01, 3),
            metadata={
                "insight": insight,
                "category": "Business Strategy",
                "impact": impact,
                "extractedFrom": extracted_from,
            },
        ))
    return nodes
