import os
import threading

os.environ["ANALYZER_USE_LLM"] = "false"

import pytest

from docgraph.models import Edge, Node
from docgraph.ontology import ExtractedEntity, ExtractedRelationship, TriageItem
from docgraph.review import ReviewNotFound, ReviewQueue
from docgraph.store import GraphStore
from docgraph.taxonomy import ENTITIES, RELATIONS


@pytest.fixture
def store():
    return GraphStore()


def test_reset_without_seed_empties_graph(store):
    store.append_all([Node(id="a", label="A", type="ai_keyword")], [])
    assert store.reset(load_seed=False) == (0, 0)
    store.reset(load_seed=True)
    assert store.reset() == (0, 0)
    assert store.list_nodes() == []
    assert store.list_links() == []


def test_reset_with_seed_loads_taxonomy(store):
    node_count, link_count = store.reset(load_seed=True)
    assert node_count == len(ENTITIES)
    assert link_count == len(RELATIONS)
    assert len(store.list_nodes()) == len(ENTITIES)
    assert store.find_node("pwc-korea").label == "PwC Korea"


def test_append_keeps_order_and_allows_duplicates(store):
    a = Node(id="a", label="A", type="ai_keyword")
    store.append_all([a], [Edge(source="a", target="missing", type="x")])
    store.append_all([a], [])
    assert [n.id for n in store.list_nodes()] == ["a", "a"]
    # links are not validated against node ids
    assert store.list_links()[0].target == "missing"


def test_snapshots_are_copies(store):
    store.append_all([Node(id="a", label="A", type="t")], [])
    snapshot = store.list_nodes()
    snapshot.clear()
    assert len(store.list_nodes()) == 1


def test_links_for_and_status(store):
    store.replace_all(
        [Node(id="a", label="A", type="t"), Node(id="b", label="B", type="t"), Node(id="c", label="C", type="u")],
        [Edge(source="a", target="b", type="next_page"), Edge(source="b", target="zzz", type="x")],
    )
    assert len(store.links_for("b")) == 2
    status = store.status()
    assert status["totalNodes"] == 3
    assert status["nodeTypes"] == {"t": 2, "u": 1}
    assert status["connectedComponents"] == 2
    assert status["danglingLinks"] == 1
    assert status["seedNodes"] == len(ENTITIES)


def test_concurrent_appends_lose_nothing(store):
    def worker(n):
        store.append_all([Node(id=f"{n}-{i}", label="x", type="t") for i in range(50)], [])

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(store.list_nodes()) == 400


# ---------------------------
# Review queue
# ---------------------------

def test_review_queue_is_seeded():
    items = ReviewQueue().pending()
    assert [i.id for i in items] == ["review-1", "review-2"]
    first = items[0].to_dict()
    assert first["text"] == "Quantum Computing"
    assert first["confidence"] == 0.65
    assert first["suggestedType"] == "technology"
    assert items[1].to_dict()["evidence"] == "AI 도입으로 자동화율이 90% 향상되었다"


def test_approving_entity_adds_node(store):
    queue = ReviewQueue()
    response = queue.decide("review-1", "approve", "looks right", store=store)
    assert response["success"] is True
    assert response["reviewId"] == "review-1"
    assert response["feedback"] == "looks right"
    assert "learningUpdate" in response
    assert [n.label for n in store.list_nodes()] == ["Quantum Computing"]
    assert [i.id for i in queue.pending()] == ["review-2"]


def test_rejecting_adds_nothing(store):
    queue = ReviewQueue()
    response = queue.decide("review-2", "reject", store=store)
    assert response["message"] == "거절되었습니다"
    assert store.list_links() == []


def test_unknown_review_id_and_decision():
    queue = ReviewQueue()
    with pytest.raises(ReviewNotFound):
        queue.decide("review-999", "approve")
    with pytest.raises(ValueError):
        queue.decide("review-1", "maybe")


def test_enqueue_triaged_items():
    queue = ReviewQueue(items=[])
    entity = ExtractedEntity(id="onto-x-0", text="Edge", type="technology", category="discovered",
                             confidence=0.6, start=0, end=4, context="Edge 플랫폼")
    added = queue.enqueue([TriageItem("entity", entity, "review_needed", "낮은 신뢰도 (0.60)")])
    assert [i.id for i in added] == ["review-1"]
    assert added[0].node.id == "onto-x-0"
    assert queue.pending()[0].reason == "낮은 신뢰도 (0.60)"


def test_enqueued_relationship_reads_as_labels(store):
    queue = ReviewQueue(items=[])
    relationship = ExtractedRelationship(id="rel-x-0", source="onto-x-1", target="onto-x-2", type="uses",
                                         confidence=0.6, evidence="AI & Analytics → Alteryx")
    added = queue.enqueue([TriageItem("relationship", relationship, "review_needed")])
    assert added[0].text == "AI & Analytics → Alteryx"
    assert added[0].to_dict()["evidence"] == "AI & Analytics → Alteryx"

    queue.decide(added[0].id, "approve", store=store)
    assert [(e.source, e.target, e.type) for e in store.list_links()] == [("onto-x-1", "onto-x-2", "uses")]
