import os

os.environ["ANALYZER_USE_LLM"] = "false"

import pytest

from docgraph.ontology import (
    ALIAS_CONFIDENCE,
    DISCOVERED_CONFIDENCE,
    LABEL_CONFIDENCE,
    ExtractedEntity,
    OntologyExtractor,
    TriageItem,
    approved_graph,
    classify_document_type,
    extract_client,
    generate_tags,
    top_uncertain,
    triage,
)
from docgraph.taxonomy import ENTITIES, RELATIONS, seed_ontology

DOC = """삼성DS 사업부 S&OP 최적화 프로젝트 제안서
Palantir 플랫폼을 활용한 실시간 데이터 분석 체계 부재
AI/ML 기반 수요 예측 모델의 정확도 개선 필요
실시간 KPI 대시보드 구현 (ROI: 예상 150%)
의사결정 시간 70% 단축, 고객 만족도 15% 향상
"""


@pytest.fixture(scope="module")
def extractor():
    return OntologyExtractor()


def test_seed_ontology_matches_taxonomy():
    nodes, edges = seed_ontology()
    assert len(nodes) == len(ENTITIES)
    assert len(edges) == len(RELATIONS)
    assert len({n.id for n in nodes}) == len(nodes)
    ids = {n.id for n in nodes}
    assert all(e.source in ids and e.target in ids for e in edges)
    assert (nodes[0].x, nodes[0].y, nodes[0].z) == (-400.0, -200.0, 0.0)
    assert edges[0].strength == RELATIONS[0].weight


def test_label_alias_and_discovery_confidences(extractor):
    found = extractor.extract_entities(DOC, "tok")
    by_text = {}
    for entity in found:
        by_text.setdefault(entity.text.lower(), []).append(entity)

    assert by_text["palantir"][0].confidence == LABEL_CONFIDENCE
    assert by_text["palantir"][0].taxonomy_id == "palantir"
    assert by_text["삼성"][0].confidence == ALIAS_CONFIDENCE
    assert by_text["삼성"][0].taxonomy_id == "samsung"
    assert any(e.confidence == DISCOVERED_CONFIDENCE and e.type == "kpi" for e in by_text["15%"])
    assert all(e.id.startswith("onto-tok-") for e in found)


def test_short_ascii_aliases_need_word_boundaries(extractor):
    found = extractor.extract_entities("we maintain a fair plan", "tok")
    assert not any(e.taxonomy_id == "ai-analytics" for e in found)


def test_normalize_merges_duplicates_with_bonus():
    def entity(i, text, confidence):
        return ExtractedEntity(id=f"e{i}", text=text, type="kpi", category="c",
                               confidence=confidence, start=0, end=1, context="")

    merged = OntologyExtractor.normalize_entities([
        entity(0, "ROI", 0.9), entity(1, "roi", 0.8), entity(2, "Cloud", 0.6), entity(3, "ROI ", 0.9),
    ])
    assert [e.id for e in merged] == ["e0", "e2"]
    assert merged[0].confidence == 0.95
    assert merged[1].confidence == 0.6


def test_relationships_need_both_endpoints(extractor):
    text = "Technology Consulting 조직은 AI & Analytics 역량과 Palantir 기반 분석을 제공한다"
    entities = extractor.normalize_entities(extractor.extract_entities(text, "tok"))
    relationships = extractor.extract_relationships(entities, "tok")
    types = {(r.type, r.confidence) for r in relationships}
    assert ("provides", 0.9) in types  # technology -> ai-analytics
    assert ("uses", 0.8) in types  # ai-analytics -> palantir
    ids = {e.id for e in entities}
    assert all(r.source in ids and r.target in ids for r in relationships)

    provides = next(r for r in relationships if r.type == "provides" and r.confidence == 0.9)
    assert TriageItem("relationship", provides, "review_needed").text == "Technology Consulting → AI & Analytics"
    assert provides.to_dict()["evidence"] == "Technology Consulting → AI & Analytics"


def test_triage_buckets(extractor):
    extraction = extractor.process("삼성_S&OP_제안서.pdf", DOC, "tok")
    result = triage(extraction)
    assert all(i.confidence >= 0.75 for i in result.auto_approved)
    assert all(0.5 <= i.confidence < 0.75 for i in result.needs_review)
    assert all(i.confidence < 0.5 for i in result.rejected)
    assert any(i.data.category == "discovered" for i in result.needs_review)
    assert extraction.document_type == "proposal"
    assert extraction.client == "samsung"
    assert extraction.title.startswith("삼성DS")

    nodes, edges = approved_graph(result, "doc-1", 400.0, 100.0, 20.0)
    assert len(nodes) == len(result.approved("entity"))
    assert all(n.processing_type == "ontology" and n.is_new for n in nodes)
    assert len(edges) == len(result.approved("relationship"))


def test_top_uncertain_sorts_by_confidence(extractor):
    result = triage(extractor.process("x.txt", DOC, "tok"))
    top = top_uncertain(result.needs_review, limit=3)
    assert len(top) <= 3
    assert [i.confidence for i in top] == sorted((i.confidence for i in top), reverse=True)


def test_document_metadata_helpers():
    assert classify_document_type("Final_Report.pdf") == "report"
    assert classify_document_type("misc.pdf") == "document"
    assert extract_client("x.pdf", "현대자동차 모빌리티") == "hyundai"
    assert extract_client("x.pdf", "nothing") is None
    assert generate_tags("클라우드 전환 전략") == ["cloud", "strategy"]
