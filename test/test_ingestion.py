import base64
import os

os.environ["ANALYZER_USE_LLM"] = "false"

import pytest

from docgraph.ingestion import (
    UploadRequest,
    apply_template,
    decode_file_content,
    effective_mode,
    ingest_document,
)
from docgraph.models import HeuristicAnalysis, LLMAnalysis, PageRecord
from docgraph.profiles import PageTemplate
from docgraph.review import ReviewQueue
from docgraph.store import GraphStore

LOTTE = "롯데케미칼 AIDT로드맵_종료보고_v0.93.pdf"
SAMSUNG = "삼성전자_DX_SCM_제안서.pdf"


@pytest.fixture
def store():
    return GraphStore()


def test_decode_file_content_variants():
    raw = b"hello world"
    encoded = base64.b64encode(raw).decode()
    assert decode_file_content(encoded) == raw
    assert decode_file_content("data:text/plain;base64," + encoded) == raw
    assert decode_file_content(None) is None
    assert decode_file_content("") is None
    with pytest.raises(ValueError):
        decode_file_content("not base64 at all!")


def test_effective_mode():
    assert effective_mode("a.pdf", None) == "unified"
    assert effective_mode("a.PDF", "pages") == "pages"
    assert effective_mode("a.docx", "unified") == "ontology"
    with pytest.raises(ValueError):
        effective_mode("a.pdf", "images")


def test_apply_template_puts_curated_items_first():
    template = PageTemplate(title="Agenda", text="", page_type="agenda", keywords=("A", "B"),
                            ai_keywords=("SCM",), summary="curated")
    record = PageRecord(page_number=2, title="x", keywords=["b", "C"], ai_keywords=["SCM", "AI"],
                        page_type="content", summary="guess")

    merged = apply_template(HeuristicAnalysis(record, "llm disabled"), template)
    assert merged.keywords == ["A", "B", "C"]
    assert merged.ai_keywords == ["SCM", "AI"]
    assert merged.page_type == "agenda"
    assert merged.summary == "curated"

    llm_record = PageRecord(page_number=2, title="model title", page_type="content", summary="model")
    merged = apply_template(LLMAnalysis(llm_record), template)
    assert merged.title == "model title"
    assert merged.page_type == "content"
    assert merged.keywords == ["A", "B"]


def test_lotte_upload(store):
    response = ingest_document(UploadRequest(LOTTE, 3_000_000), store, ReviewQueue(items=[]))
    doc = response["processedDocument"]
    assert response["success"] is True
    assert response["processingMode"] == "unified"
    assert doc["totalPages"] == 28
    assert doc["aiKeywordCount"] == 14
    assert doc["consultingInsightCount"] == 14
    assert doc["analysisPaths"] == {"llm": 0, "fallback": 28}
    assert response["pdfAnalysis"]["pageRelationships"] == 27

    links = response["newLinks"]
    insight_links = [l for l in links if l["type"] == "generates_insight"]
    assert len(insight_links) == 14
    assert {l["strength"] for l in insight_links} == {0.75}
    assert response["message"].startswith("롯데케미칼 AI/DT 로드맵 보고서 통합 처리 완료")

    ontology = response["ontologyAnalysis"]
    assert ontology["client"] == "lotte"
    assert ontology["documentType"] == "report"
    assert "ai" in ontology["tags"]
    assert 0.0 < ontology["confidence"] <= 1.0
    assert len(store.list_nodes()) == len(response["newNodes"])


def test_samsung_upload_uses_curated_pages(store):
    response = ingest_document(UploadRequest(SAMSUNG, 10), store)
    nodes = response["newNodes"]
    pages = [n for n in nodes if n["type"] == "pdf_page_image"]
    keywords = [n for n in nodes if n["type"] == "ai_keyword"]
    assert len(pages) == 5
    assert len(keywords) == 11
    assert pages[1]["metadata"]["pageType"] == "toc"
    assert pages[0]["metadata"]["aiKeywords"][:3] == ["Generative AI", "SCM", "Data Analytics"]
    assert pages[0]["metadata"]["extractedText"]
    assert keywords[0]["metadata"]["extractedFrom"] == "삼성전자 DX SCM 제안서"
    assert response["processedDocument"]["title"] == "삼성전자_DX_SCM_제안서"


def test_generic_upload_derives_candidates(store):
    response = ingest_document(UploadRequest("quarterly_review.pdf", 600 * 1024), store)
    doc = response["processedDocument"]
    assert doc["totalPages"] == 5
    assert 0 < doc["aiKeywordCount"] <= 14
    assert 0 < doc["consultingInsightCount"] <= 14


def test_ids_are_unique_across_uploads(store):
    first = ingest_document(UploadRequest(SAMSUNG, 10), store)
    second = ingest_document(UploadRequest(SAMSUNG, 10), store)
    ids_first = {n["id"] for n in first["newNodes"]}
    ids_second = {n["id"] for n in second["newNodes"]}
    assert ids_first.isdisjoint(ids_second)
    assert first["processedDocument"]["id"] != second["processedDocument"]["id"]


def test_pages_mode_only_builds_pages(store):
    response = ingest_document(UploadRequest(SAMSUNG, 10, processing_mode="pages"), store)
    assert {n["type"] for n in response["newNodes"]} == {"pdf_page_image"}
    assert [l["type"] for l in response["newLinks"]] == ["next_page"] * 4
    assert response["ontologyAnalysis"]["entities"] == 0


def test_text_upload_runs_ontology_and_queues_reviews(store):
    queue = ReviewQueue(items=[])
    text = "Palantir 플랫폼 기반 AI & Analytics 역량 강화\n고객 만족도 15% 향상".encode("utf-8")
    response = ingest_document(UploadRequest("notes.txt", len(text), text, "unified"), store, queue)
    assert response["processingMode"] == "ontology"
    assert response["pdfAnalysis"]["pages"] == 0
    assert response["ontologyAnalysis"]["entities"] > 0
    assert response["ontologyAnalysis"]["needsReview"] == len(queue.pending())
    candidates = response["ontologyAnalysis"]["topCandidates"]
    assert any(c["text"] == "15%" for c in candidates)
    for candidate in candidates:
        if candidate["type"] == "entity":
            assert candidate["candidate"]["text"] == candidate["text"]
            assert "position" in candidate["candidate"]
    assert all(n["processingType"] == "ontology" for n in response["newNodes"])
    assert response["message"].startswith("문서 처리 완료")


def test_unreadable_pdf_falls_back_to_synthesized_pages(store):
    response = ingest_document(UploadRequest(SAMSUNG, 10, b"%PDF-garbage"), store)
    assert response["processedDocument"]["totalPages"] == 5


def test_missing_file_name_is_rejected(store):
    with pytest.raises(ValueError):
        ingest_document(UploadRequest("  "), store)
