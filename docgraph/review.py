"""
Human review queue for ontology candidates whose confidence is between the
review and auto-approve thresholds.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from docgraph.models import Edge, Node, node_color
from docgraph.ontology import TriageItem, entity_node, relationship_edge
from docgraph.store import GraphStore

LOGGER = logging.getLogger(__name__)

DECISIONS = ("approve", "reject")
LEARNING_UPDATE = "피드백이 학습 모델에 반영되어 다음 처리 정확도가 향상됩니다"


class ReviewNotFound(KeyError):
    pass


@dataclass
class ReviewItem:
    id: str
    type: str  # "entity" | "relationship"
    text: str
    confidence: float
    suggested_type: str
    reason: str
    context: Optional[str] = None
    evidence: Optional[str] = None
    node: Optional[Node] = None
    edge: Optional[Edge] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "text": self.text,
            "confidence": self.confidence,
            "suggestedType": self.suggested_type,
            "reason": self.reason,
        }
        if self.context is not None:
            out["context"] = self.context
        if self.evidence is not None:
            out["evidence"] = self.evidence
        return out


def seed_review_items() -> List[ReviewItem]:
    """The two items every fresh queue starts with."""
    return [
        ReviewItem(
            id="review-1",
            type="entity",
            text="Quantum Computing",
            confidence=0.65,
            context="차세대 컴퓨팅 기술인 Quantum Computing을 활용한...",
            suggested_type="technology",
            reason="새로운 기술 용어, 확신도 검증 필요",
            node=Node(
                id="reviewed-quantum-computing",
                label="Quantum Computing",
                type="technology",
                category="discovered",
                color=node_color("technology"),
                confidence=0.65,
                is_new=True,
                processing_type="review",
            ),
        ),
        ReviewItem(
            id="review-2",
            type="relationship",
            text="AI → 자동화율",
            confidence=0.58,
            evidence="AI 도입으로 자동화율이 90% 향상되었다",
            suggested_type="improves",
            reason="관계 강도 불분명",
            edge=Edge(source="ai-analytics", target="automation-rate", type="improves", strength=0.58,
                      evidence="AI 도입으로 자동화율이 90% 향상되었다", processing_type="review"),
        ),
    ]


def item_from_triage(review_id: str, item: TriageItem, document_id: Optional[str] = None) -> ReviewItem:
    if item.kind == "entity":
        entity = item.data
        return ReviewItem(
            id=review_id,
            type="entity",
            text=entity.text,
            confidence=entity.confidence,
            context=entity.context,
            suggested_type=entity.type,
            reason=item.reason,
            node=entity_node(entity, document_id),
        )
    relationship = item.data
    return ReviewItem(
        id=review_id,
        type="relationship",
        text=item.text,
        confidence=relationship.confidence,
        evidence=relationship.evidence,
        suggested_type=relationship.type,
        reason=item.reason,
        edge=relationship_edge(relationship),
    )


class ReviewQueue:
    """
    Pending review items in arrival order.

    Args:
        items: Initial items; defaults to the seeded pair.
    """

    def __init__(self, items: Optional[Sequence[ReviewItem]] = None):
        self._lock = threading.Lock()
        self._items: List[ReviewItem] = list(seed_review_items() if items is None else items)
        self._counter = len(self._items)

    def pending(self) -> List[ReviewItem]:
        with self._lock:
            return list(self._items)

    def enqueue(self, triage_items: Sequence[TriageItem], document_id: Optional[str] = None) -> List[ReviewItem]:
        """Queue triaged candidates; returns the new review items."""
        added: List[ReviewItem] = []
        with self._lock:
            for triage_item in triage_items:
                self._counter += 1
                review = item_from_triage(f"review-{self._counter}", triage_item, document_id)
                self._items.append(review)
                added.append(review)
        if added:
            LOGGER.info(f"Queued {len(added)} items for review")
        return added

    def decide(self, review_id: str, decision: str, feedback: Optional[str] = None,
               store: Optional[GraphStore] = None) -> Dict[str, Any]:
        """
        Resolve a pending item. Approving adds its node or link to the store.

        Args:
            review_id (str): Pending item id.
            decision (str): "approve" or "reject".
            feedback: Free-form reviewer feedback, echoed back.
            store: Graph store that receives approved items.

        Returns:
            Dict[str, Any]: The decision response body.

        Raises:
            ValueError: Unknown decision.
            ReviewNotFound: No pending item with this id.
        """
        if decision not in DECISIONS:
            raise ValueError(f"decision must be one of {', '.join(DECISIONS)}")
        with self._lock:
            item = next((i for i in self._items if i.id == review_id), None)
            if item is None:
                raise ReviewNotFound(review_id)
            self._items.remove(item)

        if decision == "approve" and store is not None:
            store.append_all([item.node] if item.node else [], [item.edge] if item.edge else [])
        LOGGER.info(f"Review {review_id}: {decision}")
        return {
            "success": True,
            "reviewId": review_id,
            "decision": decision,
            "feedback": feedback,
            "message": "승인되어 온톨로지에 추가되었습니다" if decision == "approve" else "거절되었습니다",
            "learningUpdate": LEARNING_UPDATE,
        }
