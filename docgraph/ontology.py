"""
Ontology extraction: finds taxonomy entities in document text, discovers new
candidate entities from domain suffix patterns, proposes taxonomy relationships
and triages everything by confidence into auto-approved, needs-review and
rejected buckets.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from docgraph.layout import layout_entities
from docgraph.models import Edge, Node, node_color
from docgraph.taxonomy import (
    CLIENT_PATTERNS,
    DOCUMENT_TYPE_PATTERNS,
    ENTITIES,
    ENTITY_BY_ID,
    RELATIONS,
    TAG_PATTERNS,
    TaxonomyEntity,
)

LOGGER = logging.getLogger(__name__)

LABEL_CONFIDENCE = 0.9
ALIAS_CONFIDENCE = 0.8
DISCOVERED_CONFIDENCE = 0.6
MERGE_BONUS = 0.1
MERGE_CAP = 0.95

AUTO_APPROVE_THRESHOLD = 0.75
REVIEW_THRESHOLD = 0.5
CONTEXT_CHARS = 50
PROCESSING_TYPE = "ontology"

# (pattern, entity type) for candidates not yet in the taxonomy; group 1 is the entity text
DISCOVERY_PATTERNS: Tuple[Tuple["re.Pattern[str]", str], ...] = (
    (re.compile(r"(\w+)\s*(플랫폼|시스템|솔루션)", re.IGNORECASE), "technology"),
    (re.compile(r"(\w+)\s*(모델|프레임워크|방법론)", re.IGNORECASE), "deliverable"),
    (re.compile(r"(\d+%)\s*(절감|개선|향상|증가)", re.IGNORECASE), "kpi"),
    (re.compile(r"(\w+)\s*(사업부|부문|팀)", re.IGNORECASE), "organization"),
)


@dataclass
class ExtractedEntity:
    id: str
    text: str
    type: str
    category: str
    confidence: float
    start: int
    end: int
    context: str
    aliases: List[str] = field(default_factory=list)
    taxonomy_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "type": self.type,
            "category": self.category,
            "confidence": self.confidence,
            "aliases": list(self.aliases),
            "position": {"start": self.start, "end": self.end},
            "context": self.context,
            "suggestedMerge": self.taxonomy_id,
        }


@dataclass
class ExtractedRelationship:
    id: str
    source: str
    target: str
    type: str
    confidence: float
    evidence: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.type,
            "confidence": self.confidence,
            "evidence": self.evidence,
        }


@dataclass
class TriageItem:
    kind: str  # "entity" | "relationship"
    data: Any
    action: str
    reason: str = ""

    @property
    def confidence(self) -> float:
        return self.data.confidence

    @property
    def text(self) -> str:
        if self.kind == "entity":
            return self.data.text
        return self.data.evidence


@dataclass
class TriageResult:
    auto_approved: List[TriageItem] = field(default_factory=list)
    needs_review: List[TriageItem] = field(default_factory=list)
    rejected: List[TriageItem] = field(default_factory=list)

    def approved(self, kind: str) -> List[Any]:
        return [item.data for item in self.auto_approved if item.kind == kind]


@dataclass
class OntologyExtraction:
    """Everything extracted from one document."""
    title: str
    document_type: str
    client: str
    tags: List[str]
    entities: List[ExtractedEntity]
    relationships: List[ExtractedRelationship]
    confidence: float


# ---------------------------
# Document metadata
# ---------------------------

def classify_document_type(file_name: str) -> str:
    for doc_type, pattern in DOCUMENT_TYPE_PATTERNS:
        if pattern.search(file_name or ""):
            return doc_type
    return "document"


def extract_client(file_name: str, text: str) -> Optional[str]:
    for client, pattern in CLIENT_PATTERNS:
        if pattern.search(file_name or "") or pattern.search(text or ""):
            return client
    return None


def generate_tags(text: str) -> List[str]:
    return [tag for tag, pattern in TAG_PATTERNS if pattern.search(text or "")]


def extract_title(text: str) -> str:
    for line in (text or "").splitlines():
        if line.strip():
            return line.strip()
    return "Untitled Document"


# ---------------------------
# Extraction
# ---------------------------

def _term_pattern(term: str) -> "re.Pattern[str]":
    # ASCII terms only match whole words ("AI" must not hit "maintain")
    escaped = re.escape(term)
    if term.isascii():
        escaped = rf"(?<![0-9A-Za-z]){escaped}(?![0-9A-Za-z])"
    return re.compile(escaped, re.IGNORECASE)


def _context(text: str, start: int, end: int) -> str:
    return text[max(0, start - CONTEXT_CHARS):min(len(text), end + CONTEXT_CHARS)]


class OntologyExtractor:
    """
    Dictionary and pattern based entity/relationship extraction over the taxonomy.

    Args:
        entities: Taxonomy entities to match; defaults to the full taxonomy.
    """

    def __init__(self, entities: Sequence[TaxonomyEntity] = ENTITIES):
        self.entities = list(entities)
        self._patterns = [
            (entity, _term_pattern(entity.label), [_term_pattern(a) for a in entity.aliases])
            for entity in self.entities
        ]

    def extract_entities(self, text: str, token: str) -> List[ExtractedEntity]:
        """
        Raw matches in text order per source: taxonomy labels (0.9), aliases (0.8),
        then discovery patterns (0.6). Duplicates are kept; see normalize_entities.
        """
        found: List[ExtractedEntity] = []

        def add(match: "re.Match[str]", text_value: str, etype: str, category: str,
                confidence: float, aliases: Sequence[str], taxonomy_id: Optional[str]) -> None:
            found.append(ExtractedEntity(
                id=f"onto-{token}-{len(found)}",
                text=text_value,
                type=etype,
                category=category,
                confidence=confidence,
                start=match.start(),
                end=match.end(),
                context=_context(text, match.start(), match.end()),
                aliases=list(aliases),
                taxonomy_id=taxonomy_id,
            ))

        for entity, label_pattern, alias_patterns in self._patterns:
            for match in label_pattern.finditer(text):
                add(match, match.group(0), entity.type, entity.category, LABEL_CONFIDENCE,
                    entity.aliases, entity.id)
            for alias_pattern in alias_patterns:
                for match in alias_pattern.finditer(text):
                    add(match, match.group(0), entity.type, entity.category, ALIAS_CONFIDENCE,
                        (), entity.id)

        for pattern, etype in DISCOVERY_PATTERNS:
            for match in pattern.finditer(text):
                if match.group(1):
                    add(match, match.group(1), etype, "discovered", DISCOVERED_CONFIDENCE, (), None)
        return found

    @staticmethod
    def normalize_entities(entities: Sequence[ExtractedEntity]) -> List[ExtractedEntity]:
        """
        Collapses entities with the same lower-cased text. A group with more than one
        member keeps its most confident entity and raises it by MERGE_BONUS (capped).
        """
        groups: Dict[str, List[ExtractedEntity]] = {}
        for entity in entities:
            groups.setdefault(entity.text.strip().lower(), []).append(entity)

        merged: List[ExtractedEntity] = []
        for group in groups.values():
            best = max(group, key=lambda e: e.confidence)
            if len(group) > 1:
                best.confidence = round(min(MERGE_CAP, best.confidence + MERGE_BONUS), 3)
            merged.append(best)
        return merged

    @staticmethod
    def extract_relationships(entities: Sequence[ExtractedEntity], token: str) -> List[ExtractedRelationship]:
        """Taxonomy relations whose endpoints were both found; confidence is the relation weight."""
        representative: Dict[str, ExtractedEntity] = {}
        for entity in entities:
            if entity.taxonomy_id is None:
                continue
            current = representative.get(entity.taxonomy_id)
            if current is None or entity.confidence > current.confidence:
                representative[entity.taxonomy_id] = entity

        relationships: List[ExtractedRelationship] = []
        for relation in RELATIONS:
            source = representative.get(relation.source)
            target = representative.get(relation.target)
            if source is None or target is None:
                continue
            relationships.append(ExtractedRelationship(
                id=f"rel-{token}-{len(relationships)}",
                source=source.id,
                target=target.id,
                type=relation.type,
                confidence=relation.weight,
                evidence=f"{ENTITY_BY_ID[relation.source].label} → {ENTITY_BY_ID[relation.target].label}",
            ))
        return relationships

    def process(self, file_name: str, text: str, token: str) -> OntologyExtraction:
        """
        Runs extraction end to end over one document.

        Args:
            file_name (str): Uploaded file name; used for type and client detection.
            text (str): Full document text.
            token (str): Upload token used in every minted ID.

        Returns:
            OntologyExtraction: Metadata plus normalized entities and relationships.
        """
        entities = self.normalize_entities(self.extract_entities(text, token))
        relationships = self.extract_relationships(entities, token)
        LOGGER.info(f"Ontology extraction for {file_name}: {len(entities)} entities, "
                    f"{len(relationships)} relationships")
        return OntologyExtraction(
            title=extract_title(text),
            document_type=classify_document_type(file_name),
            client=extract_client(file_name, text) or "unknown",
            tags=generate_tags(text),
            entities=entities,
            relationships=relationships,
            confidence=overall_confidence(entities, relationships),
        )


def overall_confidence(entities: Sequence[ExtractedEntity],
                       relationships: Sequence[ExtractedRelationship]) -> float:
    """Weighted mean: 70% entities, 30% relationships (0.5 when there are none)."""
    if not entities:
        return 0.0
    entity_mean = sum(e.confidence for e in entities) / len(entities)
    rel_mean = (sum(r.confidence for r in relationships) / len(relationships)) if relationships else 0.5
    return round(entity_mean * 0.7 + rel_mean * 0.3, 3)


# ---------------------------
# Triage
# ---------------------------

def _bucket(kind: str, data: Any, result: TriageResult) -> None:
    confidence = data.confidence
    if confidence >= AUTO_APPROVE_THRESHOLD:
        result.auto_approved.append(TriageItem(kind, data, "add_or_merge" if kind == "entity" else "add"))
    elif confidence >= REVIEW_THRESHOLD:
        result.needs_review.append(TriageItem(kind, data, "review_needed", f"낮은 신뢰도 ({confidence:.2f})"))
    else:
        result.rejected.append(TriageItem(kind, data, "reject", f"신뢰도 임계값 미달 ({confidence:.2f})"))


def triage(extraction: OntologyExtraction) -> TriageResult:
    """Sorts entities, then relationships, into the three confidence buckets."""
    result = TriageResult()
    for entity in extraction.entities:
        _bucket("entity", entity, result)
    for relationship in extraction.relationships:
        _bucket("relationship", relationship, result)
    return result


def top_uncertain(items: Sequence[TriageItem], limit: int = 10) -> List[TriageItem]:
    """The most confident review candidates first."""
    return sorted(items, key=lambda item: item.confidence, reverse=True)[:limit]


# ---------------------------
# Graph conversion
# ---------------------------

def entity_node(entity: ExtractedEntity, document_id: Optional[str] = None) -> Node:
    return Node(
        id=entity.id,
        label=entity.text,
        type=entity.type,
        category=entity.category,
        color=node_color(entity.type),
        confidence=entity.confidence,
        is_new=True,
        document_id=document_id,
        processing_type=PROCESSING_TYPE,
        metadata={
            "context": entity.context,
            "suggestedMerge": entity.taxonomy_id,
            "aliases": list(entity.aliases),
        },
    )


def relationship_edge(relationship: ExtractedRelationship) -> Edge:
    return Edge(
        source=relationship.source,
        target=relationship.target,
        type=relationship.type,
        strength=relationship.confidence,
        evidence=relationship.evidence,
        processing_type=PROCESSING_TYPE,
    )


def approved_graph(result: TriageResult, document_id: Optional[str], radius: float,
                   z_base: float, z_step: float) -> Tuple[List[Node], List[Edge]]:
    """Nodes (laid out on their own ring) and edges for the auto-approved items."""
    nodes = [entity_node(e, document_id) for e in result.approved("entity")]
    layout_entities(nodes, radius, z_base, z_step)
    edges = [relationship_edge(r) for r in result.approved("relationship")]
    return nodes, edges
