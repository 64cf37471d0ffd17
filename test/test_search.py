import os

os.environ["ANALYZER_USE_LLM"] = "false"

from docgraph.models import Node
from docgraph.search import search_nodes


def _nodes():
    return [
        Node(id="k-0", label="AI", type="ai_keyword", x=1.0, y=2.0, z=3.0, confidence=0.9),
        Node(id="c-0", label="리스크 관리", type="consulting_insight", confidence=0.85),
        Node(
            id="p-1",
            label="프로젝트 추진 목표",
            type="pdf_page_image",
            metadata={
                "title": "프로젝트 추진 목표",
                "extractedText": "Gen AI 기반 내/외부 데이터의 업무 활용을 극대화하여 NSCM 시스템의 사용성 제고",
                "keywords": ["Gen AI", "NSCM", ""],
                "aiKeywords": ["Multi Agent"],
                "consultingInsights": ["사용성 제고"],
                "summary": "SCM 데이터 활용 극대화",
            },
        ),
        Node(id="cap", label="Cloud", type="capability"),
    ]


def test_search_is_case_insensitive():
    result = search_nodes("ai", _nodes())
    ids = [m["nodeId"] for m in result["matchedNodes"]]
    assert "k-0" in ids
    assert "p-1" in ids
    assert result["totalMatches"] == len(ids)
    assert result["path"] == ids
    assert result["query"] == "ai"


def test_exact_metadata_keyword_matches():
    nodes = _nodes() + [Node(id="kw", label="X", type="pdf_page_image", metadata={"keywords": ["AI"]})]
    result = search_nodes("ai", nodes)
    matched = {m["nodeId"]: m for m in result["matchedNodes"]}
    assert "kw" in matched
    assert matched["kw"]["matchReason"] == "키워드 매칭: AI"


def test_longer_query_containing_stored_keyword_matches():
    result = search_nodes("multi agent orchestration", _nodes())
    assert [m["nodeId"] for m in result["matchedNodes"]] == ["p-1"]
    assert "AI키워드 매칭: Multi Agent" in result["matchedNodes"][0]["matchReason"]


def test_empty_keyword_entries_do_not_match_everything():
    result = search_nodes("zzz", _nodes())
    assert result["matchedNodes"] == []


def test_blank_query_matches_nothing():
    for query in ("", "   ", None):
        result = search_nodes(query, _nodes())
        assert result["success"] is True
        assert result["totalMatches"] == 0
        assert result["insights"] == []


def test_result_entry_shape_and_insights():
    result = search_nodes("  AI ", _nodes())
    first = result["matchedNodes"][0]
    assert first == {
        "nodeId": "k-0",
        "nodeType": "ai_keyword",
        "label": "AI",
        "matchReason": "라벨 매칭: AI",
        "confidence": 0.9,
        "position": {"x": 1.0, "y": 2.0, "z": 3.0},
    }
    assert any("AI 키워드" in i for i in result["insights"])
    assert any("프로젝트 추진 목표" in i for i in result["insights"])


def test_insertion_order_is_kept():
    result = search_nodes("e", _nodes())
    ids = [m["nodeId"] for m in result["matchedNodes"]]
    assert ids == [n.id for n in _nodes() if n.id in ids]
