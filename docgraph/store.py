"""
In-memory graph store. One instance per application, shared by every request
handler; all reads return snapshots and all writes go through a lock.
"""
from __future__ import annotations

import logging
import threading
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Tuple

import networkx as nx

from docgraph.models import Edge, Node
from docgraph.taxonomy import seed_ontology

LOGGER = logging.getLogger(__name__)


class GraphStore:
    """
    Nodes and links in insertion order. Links are never validated against node IDs.

    Args:
        nodes: Initial nodes.
        edges: Initial links.
    """

    def __init__(self, nodes: Optional[Iterable[Node]] = None, edges: Optional[Iterable[Edge]] = None):
        self._lock = threading.Lock()
        self._nodes: List[Node] = list(nodes or [])
        self._edges: List[Edge] = list(edges or [])

    @classmethod
    def seeded(cls) -> "GraphStore":
        nodes, edges = seed_ontology()
        return cls(nodes, edges)

    # ---------------------------
    # Reads
    # ---------------------------

    def list_nodes(self) -> List[Node]:
        with self._lock:
            return list(self._nodes)

    def list_links(self) -> List[Edge]:
        with self._lock:
            return list(self._edges)

    def find_node(self, node_id: str) -> Optional[Node]:
        with self._lock:
            for node in self._nodes:
                if node.id == node_id:
                    return node
        return None

    def links_for(self, node_id: str) -> List[Edge]:
        """Links touching the node in either direction."""
        with self._lock:
            return [e for e in self._edges if e.source == node_id or e.target == node_id]

    def nodes_for_document(self, document_id: str) -> List[Node]:
        with self._lock:
            return [n for n in self._nodes if n.document_id == document_id]

    # ---------------------------
    # Writes
    # ---------------------------

    def append_all(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        nodes, edges = list(nodes), list(edges)
        with self._lock:
            self._nodes.extend(nodes)
            self._edges.extend(edges)
        LOGGER.info(f"Appended {len(nodes)} nodes and {len(edges)} links")

    def replace_all(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        nodes, edges = list(nodes), list(edges)
        with self._lock:
            self._nodes = nodes
            self._edges = edges

    def reset(self, load_seed: bool = False) -> Tuple[int, int]:
        """
        Replace the graph with the seed ontology or with nothing.

        Args:
            load_seed (bool): Load the seed ontology after clearing.

        Returns:
            Tuple[int, int]: (node count, link count) after the reset.
        """
        nodes, edges = seed_ontology() if load_seed else ([], [])
        self.replace_all(nodes, edges)
        LOGGER.info(f"Graph reset (seed={load_seed}): {len(nodes)} nodes, {len(edges)} links")
        return len(nodes), len(edges)

    # ---------------------------
    # Status
    # ---------------------------

    def to_networkx(self) -> nx.Graph:
        """Undirected view over the current graph; links to unknown nodes are left out."""
        nodes, edges = self.list_nodes(), self.list_links()
        graph = nx.Graph()
        for node in nodes:
            graph.add_node(node.id, type=node.type, label=node.label)
        for edge in edges:
            if edge.source in graph and edge.target in graph:
                graph.add_edge(edge.source, edge.target, type=edge.type, weight=edge.strength)
        return graph

    def status(self) -> Dict[str, Any]:
        nodes, edges = self.list_nodes(), self.list_links()
        seed_nodes, seed_edges = seed_ontology()
        graph = self.to_networkx()
        known = set(graph.nodes)
        return {
            "totalNodes": len(nodes),
            "totalLinks": len(edges),
            "seedNodes": len(seed_nodes),
            "seedLinks": len(seed_edges),
            "nodeTypes": dict(Counter(n.type for n in nodes)),
            "categories": dict(Counter(n.category for n in nodes if n.category)),
            "newNodes": sum(1 for n in nodes if n.is_new),
            "connectedComponents": nx.number_connected_components(graph) if nodes else 0,
            "danglingLinks": sum(1 for e in edges if e.source not in known or e.target not in known),
        }
