"""Keyword search over node labels and page metadata."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from docgraph.models import Node

LOGGER = logging.getLogger(__name__)

SNIPPET_CHARS = 50

# (metadata key, reason prefix) checked by plain substring; summary is checked last
_TEXT_FIELDS = (
    ("title", "제목 매칭"),
    ("extractedText", "내용 매칭"),
)
# (metadata key, reason prefix) checked by containment in either direction
_LIST_FIELDS = (
    ("keywords", "키워드 매칭"),
    ("aiKeywords", "AI키워드 매칭"),
    ("consultingInsights", "컨설팅인사이트 매칭"),
)

_INSIGHT_TEMPLATES = {
    "pdf_page_image": '페이지 "{label}"에서 "{query}" 관련 내용을 발견했습니다.',
    "ai_keyword": 'AI 키워드 "{label}"가 "{query}"와 연관됩니다.',
    "consulting_insight": '컨설팅 인사이트 "{label}"에서 "{query}" 관련 통찰을 찾았습니다.',
}


def _snippet(value: str) -> str:
    return value if len(value) <= SNIPPET_CHARS else value[:SNIPPET_CHARS] + "..."


def _list_match(values: Any, keyword: str) -> Optional[str]:
    if not isinstance(values, list):
        return None
    for value in values:
        if not isinstance(value, str) or not value.strip():
            continue
        low = value.lower()
        if keyword in low or low in keyword:
            return value
    return None


def match_reasons(node: Node, keyword: str) -> List[str]:
    """Why a node matches the lower-cased keyword; empty when it does not."""
    reasons: List[str] = []
    if node.label and keyword in node.label.lower():
        reasons.append(f"라벨 매칭: {node.label}")

    meta = node.metadata or {}
    for key, prefix in _TEXT_FIELDS:
        value = meta.get(key)
        if isinstance(value, str) and keyword in value.lower():
            reasons.append(f"{prefix}: {_snippet(value) if key != 'title' else value}")
    for key, prefix in _LIST_FIELDS:
        hit = _list_match(meta.get(key), keyword)
        if hit is not None:
            reasons.append(f"{prefix}: {hit}")
    summary = meta.get("summary")
    if isinstance(summary, str) and keyword in summary.lower():
        reasons.append(f"요약 매칭: {_snippet(summary)}")
    return reasons


def search_nodes(query: Optional[str], nodes: Sequence[Node]) -> Dict[str, Any]:
    """
    Case-insensitive search across nodes, in store order and without a limit.

    Args:
        query: Raw query; trimmed and lower-cased. Blank queries match nothing.
        nodes: Nodes to scan.

    Returns:
        Dict[str, Any]: `{success, query, matchedNodes, totalMatches, path, insights, searchTime}`.
    """
    keyword = (query or "").strip().lower()
    matched: List[Dict[str, Any]] = []
    insights: List[str] = []

    if keyword:
        for node in nodes:
            reasons = match_reasons(node, keyword)
            if not reasons:
                continue
            matched.append({
                "nodeId": node.id,
                "nodeType": node.type or "unknown",
                "label": node.label or "Untitled",
                "matchReason": "; ".join(reasons),
                "confidence": node.confidence,
                "position": {"x": node.x, "y": node.y, "z": node.z},
            })
            template = _INSIGHT_TEMPLATES.get(node.type)
            if template:
                insights.append(template.format(label=node.label, query=keyword))

    LOGGER.info(f'Search "{keyword}": {len(matched)} matches')
    return {
        "success": True,
        "query": keyword,
        "matchedNodes": matched,
        "totalMatches": len(matched),
        "path": [m["nodeId"] for m in matched],
        "insights": insights,
        "searchTime": int(time.time() * 1000),
    }
