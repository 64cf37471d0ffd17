"""
HTTP API: graph reads, reset, document upload, search, page lookup and the review queue.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from docgraph.ingestion import DEFAULT_MODE, UploadRequest, decode_file_content, ingest_document
from docgraph.relations import NEXT_PAGE
from docgraph.review import ReviewNotFound, ReviewQueue
from docgraph.search import search_nodes
from docgraph.settings import Settings, settings
from docgraph.store import GraphStore

LOGGER = logging.getLogger(__name__)

PAGE_NODE_TYPE = "pdf_page_image"


# ---------------------------
# Request models
# ---------------------------

class UploadBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="fileName", min_length=1)
    file_size: Optional[int] = Field(default=None, alias="fileSize", ge=0)
    file_content: Optional[str] = Field(default=None, alias="fileContent")
    processing_mode: str = Field(default=DEFAULT_MODE, alias="processingMode")


class ResetBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    load_seed: bool = Field(default=False, alias="loadSeed")


class SearchBody(BaseModel):
    query: Optional[str] = None


class DecisionBody(BaseModel):
    decision: str
    feedback: Optional[str] = None


# ---------------------------
# Dependencies
# ---------------------------

def get_store(request: Request) -> GraphStore:
    return request.app.state.store


def get_review_queue(request: Request) -> ReviewQueue:
    return request.app.state.review_queue


def _invalid_json() -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": "Invalid JSON"})


# ---------------------------
# Routes
# ---------------------------

router = APIRouter(prefix="/api")


@router.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/ontology/nodes")
def ontology_nodes(store: GraphStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return [n.to_dict() for n in store.list_nodes()]


@router.get("/ontology/links")
def ontology_links(store: GraphStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return [e.to_dict() for e in store.list_links()]


@router.get("/ontology/status")
def ontology_status(store: GraphStore = Depends(get_store)) -> Dict[str, Any]:
    return {"success": True, **store.status()}


@router.post("/ontology/reset")
def ontology_reset(body: Optional[ResetBody] = None, store: GraphStore = Depends(get_store)) -> Dict[str, Any]:
    load_seed = body.load_seed if body is not None else False
    node_count, link_count = store.reset(load_seed)
    message = "시드 온톨로지로 초기화되었습니다" if load_seed else "그래프가 비워졌습니다"
    return {"success": True, "message": message, "nodeCount": node_count, "linkCount": link_count}


@router.post("/documents/upload")
async def upload_document(request: Request) -> Dict[str, Any]:
    """
    JSON body `{fileName, fileSize, fileContent?, processingMode}` or a multipart
    form with a `file` part and an optional `processingMode` field.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        upload = await _upload_from_form(request)
    else:
        try:
            payload = await request.json()
        except json.JSONDecodeError:
            return _invalid_json()
        try:
            body = UploadBody.model_validate(payload)
        except ValidationError as e:
            raise RequestValidationError(e.errors(include_url=False, include_context=False)) from e
        upload = UploadRequest(
            file_name=body.file_name,
            file_size=body.file_size,
            content=decode_file_content(body.file_content),
            processing_mode=body.processing_mode,
        )

    state = request.app.state
    return await run_in_threadpool(ingest_document, upload, state.store, state.review_queue,
                                   state.chat, state.settings)


async def _upload_from_form(request: Request) -> UploadRequest:
    form = await request.form()
    file = form.get("file")
    if not isinstance(file, UploadFile) or not file.filename:
        raise HTTPException(status_code=400, detail="multipart upload needs a 'file' part")
    data = await file.read()
    return UploadRequest(
        file_name=file.filename,
        file_size=len(data),
        content=data,
        processing_mode=str(form.get("processingMode") or DEFAULT_MODE),
    )


@router.post("/search")
def search(body: SearchBody, store: GraphStore = Depends(get_store)) -> Dict[str, Any]:
    return search_nodes(body.query, store.list_nodes())


@router.get("/pdf/page/{page_id}")
def pdf_page(page_id: str, store: GraphStore = Depends(get_store)) -> Dict[str, Any]:
    node = store.find_node(page_id)
    if node is None or node.type != PAGE_NODE_TYPE:
        raise HTTPException(status_code=404, detail=f"Page not found: {page_id}")
    links = store.links_for(page_id)
    related_ids = [
        (e.target if e.source == page_id else e.source) for e in links if e.type == NEXT_PAGE
    ]
    related = [n for n in (store.find_node(i) for i in related_ids) if n is not None]
    return {
        "success": True,
        "page": node.to_dict(),
        "relatedPages": [n.to_dict() for n in related],
        "links": [e.to_dict() for e in links],
    }


@router.get("/pdf/document/{doc_id}/pages")
def pdf_document_pages(doc_id: str, store: GraphStore = Depends(get_store)) -> Dict[str, Any]:
    pages = [n for n in store.nodes_for_document(doc_id) if n.type == PAGE_NODE_TYPE]
    if not pages:
        raise HTTPException(status_code=404, detail=f"Document not found: {doc_id}")
    pages.sort(key=lambda n: n.page_number or 0)
    return {
        "success": True,
        "documentId": doc_id,
        "totalPages": len(pages),
        "pages": [n.to_dict() for n in pages],
    }


@router.get("/review/pending")
def review_pending(queue: ReviewQueue = Depends(get_review_queue)) -> List[Dict[str, Any]]:
    return [item.to_dict() for item in queue.pending()]


@router.post("/review/{review_id}/decision")
def review_decision(review_id: str, body: DecisionBody, queue: ReviewQueue = Depends(get_review_queue),
                    store: GraphStore = Depends(get_store)) -> Dict[str, Any]:
    try:
        return queue.decide(review_id, body.decision, body.feedback, store=store)
    except ReviewNotFound:
        raise HTTPException(status_code=404, detail=f"Review item not found: {review_id}")


# ---------------------------
# Exception handlers
# ---------------------------

async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(e.get("type") == "json_invalid" for e in errors):
        return _invalid_json()
    LOGGER.info(f"Validation error: {errors}")
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder({"success": False, "error": "Validation error", "detail": errors}),
    )


async def http_exception_handler(_request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        LOGGER.error(f"HTTP {exc.status_code}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})


async def value_error_handler(_request: Request, exc: ValueError):
    LOGGER.info(f"Bad request: {exc}")
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


async def general_exception_handler(_request: Request, exc: Exception):
    LOGGER.exception(f"Unexpected error: {type(exc).__name__}: {exc}")
    return PlainTextResponse(f"Server Error: {exc}", status_code=500)


# ---------------------------
# Factory
# ---------------------------

def create_app(store: Optional[GraphStore] = None, review_queue: Optional[ReviewQueue] = None,
               chat: Optional[Any] = None, cfg: Optional[Settings] = None) -> FastAPI:
    """
    Build the application around one graph store and one review queue.

    Args:
        store (Optional[GraphStore]): Graph store; a seeded store when omitted.
        review_queue (Optional[ReviewQueue]): Review queue; the default seeded queue when omitted.
        chat: Chat client handed to the page analyzer; the shared client when omitted.
        cfg (Optional[Settings]): Settings bundle. Defaults to the module level settings.

    Returns:
        FastAPI: The configured application.
    """
    cfg = cfg or settings
    app = FastAPI(title="docgraph", version="0.1.0")
    app.state.store = store if store is not None else GraphStore.seeded()
    app.state.review_queue = review_queue if review_queue is not None else ReviewQueue()
    app.state.chat = chat
    app.state.settings = cfg

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.server.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
    app.include_router(router)
    return app
