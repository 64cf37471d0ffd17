"""
Document-to-graph ingestion: the upload pipeline behind POST /api/documents/upload.

profile → page texts → page analysis → entity synthesis → layout →
relationships → ontology stage → store.
"""
from __future__ import annotations

import base64
import binascii
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from docgraph.analyzer import PageAnalyzer
from docgraph.estimator import estimate_pages
from docgraph.fileparser import DocumentParseError, FileParser
from docgraph.layout import layout_entities, layout_pages
from docgraph.models import AnalysisResult, Edge, HeuristicAnalysis, Node, PageRecord, node_color
from docgraph.ontology import (
    OntologyExtraction,
    OntologyExtractor,
    TriageResult,
    approved_graph,
    classify_document_type,
    top_uncertain,
    triage,
)
from docgraph.profiles import DocumentProfile, PageTemplate, resolve_profile
from docgraph.relations import NEXT_PAGE, build_relationships, sequential_edges
from docgraph.review import ReviewQueue
from docgraph.settings import Settings, settings
from docgraph.store import GraphStore
from docgraph.synthesizer import candidate_lists, dedupe, insight_nodes, keyword_nodes
from docgraph.utils import new_token

LOGGER = logging.getLogger(__name__)

PROCESSING_MODES = ("unified", "pages", "ontology")
DEFAULT_MODE = "unified"
MAIN_TOPIC_COUNT = 5


@dataclass
class UploadRequest:
    file_name: str
    file_size: Optional[int] = None
    content: Optional[bytes] = None
    processing_mode: str = DEFAULT_MODE


def decode_file_content(file_content: Optional[str]) -> Optional[bytes]:
    """
    Decode a JSON `fileContent` value: plain base64 or a `data:` URL.

    Raises:
        ValueError: The value is not valid base64.
    """
    if not file_content:
        return None
    payload = file_content
    if payload.startswith("data:"):
        _, _, payload = payload.partition(",")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"fileContent is not valid base64: {e}") from e


def effective_mode(file_name: str, requested: Optional[str]) -> str:
    """Non-PDF uploads always run the ontology pipeline."""
    mode = requested or DEFAULT_MODE
    if mode not in PROCESSING_MODES:
        raise ValueError(f"processingMode must be one of {', '.join(PROCESSING_MODES)}")
    if not file_name.lower().endswith(".pdf"):
        return "ontology"
    return mode


def document_title(file_name: str, profile: DocumentProfile) -> str:
    return profile.title or Path(file_name).stem or file_name


# ---------------------------
# Page texts
# ---------------------------

def page_texts(request: UploadRequest, profile: DocumentProfile,
               title: str) -> Tuple[List[Tuple[int, str]], bool]:
    """
    Per-page text for the upload.

    Returns:
        Tuple[List[Tuple[int, str]], bool]: (page_number, text) pairs and whether
        they were synthesized from the profile rather than parsed from the file.
    """
    if request.content:
        try:
            pages, _ = FileParser().parse_bytes(request.content, request.file_name)
            if pages:
                return pages, False
            LOGGER.warning(f"No text found in {request.file_name}, synthesizing pages")
        except DocumentParseError as e:
            LOGGER.warning(f"Could not parse {request.file_name}, synthesizing pages: {e}")

    count = estimate_pages(request.file_name, request.file_size, profile)
    return [(n, profile.page_template(n, title).text) for n in range(1, count + 1)], True


def apply_template(result: AnalysisResult, template: PageTemplate) -> PageRecord:
    """
    Merge curated template content into an analysed page. Curated list items come
    first; descriptive fields only replace heuristic guesses.
    """
    record = result.record
    record.keywords = dedupe(list(template.keywords) + record.keywords)
    record.ai_keywords = dedupe(list(template.ai_keywords) + record.ai_keywords)
    record.consulting_insights = dedupe(list(template.consulting_insights) + record.consulting_insights)
    if isinstance(result, HeuristicAnalysis):
        record.title = template.title or record.title
        record.subtitle = template.subtitle or record.subtitle
        record.page_type = template.page_type or record.page_type
        record.intent = template.intent or record.intent
        record.summary = template.summary or record.summary
    return record


# ---------------------------
# Graph pieces
# ---------------------------

def page_node(record: PageRecord, result: AnalysisResult, text: str, token: str,
              document_id: str) -> Node:
    metadata = record.to_metadata()
    metadata.update({
        "extractedText": text,
        "wordCount": len(text.split()),
        "analysisPath": result.path,
    })
    if isinstance(result, HeuristicAnalysis):
        metadata["fallbackReason"] = result.reason
    return Node(
        id=f"page-img-{token}-{record.page_number}",
        label=record.title or f"Page {record.page_number}",
        type="pdf_page_image",
        category="document_page_image",
        color=node_color("pdf_page_image"),
        confidence=record.confidence or 0.9,
        metadata=metadata,
        document_id=document_id,
        page_number=record.page_number,
        is_new=True,
        processing_type="pages",
    )


def _main_topics(profile: DocumentProfile, records: Sequence[PageRecord]) -> List[str]:
    if profile.main_topics:
        return list(profile.main_topics)
    return dedupe(k for r in records for k in r.keywords)[:MAIN_TOPIC_COUNT]


def _ontology_stage(file_name: str, text: str, token: str, document_id: str,
                    review_queue: Optional[ReviewQueue],
                    cfg: Settings) -> Tuple[OntologyExtraction, TriageResult, List[Node], List[Edge]]:
    extraction = OntologyExtractor().process(file_name, text, token)
    result = triage(extraction)
    nodes, edges = approved_graph(result, document_id, cfg.layout.entity_radius,
                                  cfg.layout.entity_z_base, cfg.layout.entity_z_step)
    if review_queue is not None:
        review_queue.enqueue(result.needs_review, document_id)
    return extraction, result, nodes, edges


def _ontology_summary(extraction: Optional[OntologyExtraction], result: Optional[TriageResult]) -> Dict[str, Any]:
    if extraction is None or result is None:
        return {"entities": 0, "relationships": 0, "needsReview": 0, "topCandidates": []}
    return {
        "title": extraction.title,
        "documentType": extraction.document_type,
        "client": extraction.client,
        "tags": list(extraction.tags),
        "confidence": extraction.confidence,
        "entities": len(result.approved("entity")),
        "relationships": len(result.approved("relationship")),
        "needsReview": len(result.needs_review),
        "topCandidates": [
            {"type": item.kind, "text": item.text, "confidence": item.confidence, "reason": item.reason,
             "candidate": item.data.to_dict()}
            for item in top_uncertain(result.needs_review, limit=5)
        ],
    }


# ---------------------------
# Pipeline
# ---------------------------

def ingest_document(request: UploadRequest, store: GraphStore, review_queue: Optional[ReviewQueue] = None,
                    chat: Optional[Any] = None, cfg: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Run the full ingestion pipeline for one upload and append the result to the store.

    Args:
        request (UploadRequest): File name, size, optional bytes and processing mode.
        store (GraphStore): Receives the new nodes and links.
        review_queue (Optional[ReviewQueue]): Receives ontology candidates that need review.
        chat: Chat client for the page analyzer; the shared client is used when omitted.
        cfg (Optional[Settings]): Settings bundle. Defaults to the module level settings.

    Returns:
        Dict[str, Any]: The upload response body.

    Raises:
        ValueError: Missing file name or unknown processing mode.
    """
    cfg = cfg or settings
    started = time.perf_counter()
    if not request.file_name or not request.file_name.strip():
        raise ValueError("fileName is required")

    mode = effective_mode(request.file_name, request.processing_mode)
    profile = resolve_profile(request.file_name)
    token = new_token()
    document_id = f"pdf-doc-{token}"
    title = document_title(request.file_name, profile)
    LOGGER.info(f"Ingesting {request.file_name} (mode={mode}, profile={profile.key})")

    pages, synthesized = page_texts(request, profile, title)
    full_text = "\n".join(text for _, text in pages)

    page_nodes: List[Node] = []
    page_edges: List[Edge] = []
    entity_nodes: List[Node] = []
    entity_edges: List[Edge] = []
    records: List[PageRecord] = []
    paths = {"llm": 0, "fallback": 0}
    ai_keywords: List[str] = []
    insights: List[str] = []
    ontology_extraction: Optional[OntologyExtraction] = None
    ontology_result: Optional[TriageResult] = None
    ontology_nodes: List[Node] = []
    ontology_edges: List[Edge] = []

    if mode in ("unified", "pages"):
        analyzer = PageAnalyzer(chat=chat, cfg=cfg)
        results = analyzer.analyze_pages(pages, title, full_text[: cfg.analyzer.context_chars])
        for (number, text), result in zip(pages, results):
            paths[result.path] += 1
            record = apply_template(result, profile.page_template(number, title)) if synthesized else result.record
            records.append(record)
            page_nodes.append(page_node(record, result, text, token, document_id))
        LOGGER.info(f"Analysed {len(pages)} pages: {paths['llm']} by LLM, {paths['fallback']} by fallback")

        layout_pages(page_nodes, profile.page_radius or cfg.layout.page_radius,
                     profile.page_z_step or cfg.layout.page_z_step)

    if mode == "pages":
        page_edges = sequential_edges(page_nodes)
    elif mode == "unified":
        ai_keywords, insights = candidate_lists(profile, records)
        extracted_from = profile.extracted_from or title
        keywords = keyword_nodes(ai_keywords, token, extracted_from, document_id)
        insight_list = insight_nodes(insights, token, extracted_from, document_id, profile.insight_impact)
        layout_entities(keywords, profile.keyword_radius or cfg.layout.keyword_radius,
                        cfg.layout.keyword_z_base, cfg.layout.keyword_z_step)
        layout_entities(insight_list, profile.insight_radius or cfg.layout.insight_radius,
                        cfg.layout.insight_z_base, cfg.layout.insight_z_step)
        entity_nodes = keywords + insight_list
        all_edges = build_relationships(page_nodes, keywords, insight_list,
                                        profile.keyword_strength, profile.insight_strength)
        page_edges = [e for e in all_edges if e.type == NEXT_PAGE]
        entity_edges = [e for e in all_edges if e.type != NEXT_PAGE]

    if mode in ("unified", "ontology"):
        ontology_extraction, ontology_result, ontology_nodes, ontology_edges = _ontology_stage(
            request.file_name, full_text, token, document_id, review_queue, cfg)

    for edge in page_edges:
        edge.processing_type = "pages"

    new_nodes = page_nodes + entity_nodes + ontology_nodes
    new_links = page_edges + entity_edges + ontology_edges
    store.append_all(new_nodes, new_links)

    if mode == "ontology":
        message = (f"문서 처리 완료: {len(ontology_result.auto_approved)}개 자동 승인, "
                   f"{len(ontology_result.needs_review)}개 검토 필요")
    elif mode == "pages":
        message = f"{title} 페이지 처리 완료: {len(page_nodes)}개 페이지, {len(page_edges)}개 관계 생성"
    else:
        message = (f"{profile.report_name or title} 통합 처리 완료: "
                   f"{len(new_nodes)}개 노드, {len(new_links)}개 관계 생성")

    main_topics = _main_topics(profile, records)
    elapsed_ms = int((time.perf_counter() - started) * 1000)
    LOGGER.info(f"Ingested {request.file_name}: {len(new_nodes)} nodes, {len(new_links)} links in {elapsed_ms} ms")

    return {
        "success": True,
        "processingMode": mode,
        "processedDocument": {
            "id": document_id,
            "filename": request.file_name,
            "title": title,
            "totalPages": len(pages),
            "aiKeywordCount": len(ai_keywords),
            "consultingInsightCount": len(insights),
            "mainTopics": main_topics,
            "analysisPaths": paths,
            "profile": profile.key,
            "documentType": classify_document_type(request.file_name),
        },
        "pdfAnalysis": {
            "pages": len(page_nodes),
            "pageNodes": len(page_nodes),
            "pageRelationships": len(page_edges),
            "mainTopics": main_topics,
        },
        "ontologyAnalysis": _ontology_summary(ontology_extraction, ontology_result),
        "totalProcessingTime": elapsed_ms,
        "newNodes": [n.to_dict() for n in new_nodes],
        "newLinks": [e.to_dict() for e in new_links],
        "message": message,
    }

