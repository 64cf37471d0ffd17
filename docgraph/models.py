"""Graph and page records shared by the ingestion pipeline, the store and the API."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

# ─────────────────────────────────────────────────────────────
# Node colors per type
# ─────────────────────────────────────────────────────────────

NODE_COLORS: Dict[str, str] = {
    "organization": "#e74c3c",
    "division": "#c0392b",
    "practice": "#e67e22",
    "industry": "#3498db",
    "client": "#2980b9",
    "capability": "#2ecc71",
    "technology": "#9b59b6",
    "deliverable": "#f39c12",
    "kpi": "#1abc9c",
    "document": "#95a5a6",
    "pdf_page_image": "#ffffff",
    "ai_keyword": "#e74c3c",
    "consulting_insight": "#f39c12",
    "pdf_page": "#3498db",
}
DEFAULT_COLOR = "#34495e"

def node_color(node_type: str) -> str:
    return NODE_COLORS.get(node_type, DEFAULT_COLOR)


# ─────────────────────────────────────────────────────────────
# Graph records
# ─────────────────────────────────────────────────────────────

@dataclass
class Node:
    """
    A graph vertex: a page, an extracted entity or a seed ontology entry.
    Coordinates are filled in by the layout step.
    """
    id: str
    label: str
    type: str
    category: Optional[str] = None
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    color: str = DEFAULT_COLOR
    confidence: float = 0.9
    metadata: Dict[str, Any] = field(default_factory=dict)
    document_id: Optional[str] = None
    page_number: Optional[int] = None
    size: Optional[int] = None
    is_new: bool = False
    processing_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys the renderer reads."""
        out: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type,
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "color": self.color,
            "confidence": self.confidence,
            "metadata": self.metadata,
        }
        if self.category is not None:
            out["category"] = self.category
        if self.document_id is not None:
            out["documentId"] = self.document_id
        if self.page_number is not None:
            out["pageNumber"] = self.page_number
        if self.size is not None:
            out["size"] = self.size
        if self.is_new:
            out["isNew"] = True
        if self.processing_type is not None:
            out["processingType"] = self.processing_type
        return out


@dataclass
class Edge:
    source: str
    target: str
    type: str
    strength: float = 1.0
    evidence: Optional[str] = None
    processing_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "source": self.source,
            "target": self.target,
            "type": self.type,
            "strength": self.strength,
        }
        if self.evidence is not None:
            out["evidence"] = self.evidence
        if self.processing_type is not None:
            out["processingType"] = self.processing_type
        return out


# ─────────────────────────────────────────────────────────────
# Page analysis records
# ─────────────────────────────────────────────────────────────

@dataclass
class PageRecord:
    """
    The analysed view of one page. Both analysis paths fill every field.
    """
    page_number: int
    title: str
    subtitle: str = ""
    intent: str = "inform"
    head_message: str = ""
    key_messages: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    ai_keywords: List[str] = field(default_factory=list)
    consulting_insights: List[str] = field(default_factory=list)
    page_type: str = "content"
    summary: str = ""
    data_source: List[str] = field(default_factory=list)
    kpi: str = ""
    risks: str = ""
    decisions: str = ""
    framework: str = ""
    confidence: float = 0.0

    def to_metadata(self) -> Dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "title": self.title,
            "subtitle": self.subtitle,
            "intent": self.intent,
            "headMessage": self.head_message,
            "keyMessages": list(self.key_messages),
            "keywords": list(self.keywords),
            "aiKeywords": list(self.ai_keywords),
            "consultingInsights": list(self.consulting_insights),
            "pageType": self.page_type,
            "summary": self.summary,
            "dataSource": list(self.data_source),
            "kpi": self.kpi,
            "risks": self.risks,
            "decisions": self.decisions,
            "framework": self.framework,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class LLMAnalysis:
    """Page analysed by the chat model."""
    record: PageRecord

    @property
    def path(self) -> str:
        return "llm"


@dataclass(frozen=True)
class HeuristicAnalysis:
    """Page analysed by the text heuristics; `reason` says why the model was not used."""
    record: PageRecord
    reason: str

    @property
    def path(self) -> str:
        return "fallback"


AnalysisResult = Union[LLMAnalysis, HeuristicAnalysis]
