"""
Circular fund routing: money leaving an account and returning to it through
2-4 intermediaries (A -> B -> C -> A).

Depth-limited DFS from every account. Recursion never goes past MAX_CYCLE_LENGTH
nodes, so the work per start node is O(d^5) for average out-degree d.
"""
from typing import FrozenSet, List, Set, Tuple

from ..core.graph import AdjacencyIndex
from ..models import FraudRing, TransactionGraph

MIN_CYCLE_LENGTH = 3
MAX_CYCLE_LENGTH = 5
CYCLE_RISK_SCORE = 90.0


def cycle_signature(members) -> str:
    """Order-independent key: two cycles over the same accounts are one ring."""
    return ",".join(sorted(members))


def detect_cycles(graph: TransactionGraph, index: AdjacencyIndex) -> List[FraudRing]:
    """Enumerates distinct simple cycles with 3 to 5 edges."""
    rings: List[FraudRing] = []
    recorded: Set[str] = set()

    def walk(current: str, start: str, path: Tuple[str, ...], on_path: FrozenSet[str]):
        depth = len(path)
        for neighbor in index.out_neighbors(current):
            if neighbor == start and MIN_CYCLE_LENGTH <= depth <= MAX_CYCLE_LENGTH:
                key = cycle_signature(path)
                if key in recorded:
                    continue
                recorded.add(key)
                rings.append(FraudRing(
                    ring_id=f"RING_{len(rings) + 1:03d}",
                    pattern_type="cycle",
                    risk_score=CYCLE_RISK_SCORE,
                    members=path,
                    detail=f"Circular fund routing: {' → '.join(path)} → {start} (length {depth})",
                ))
            elif neighbor not in on_path and depth < MAX_CYCLE_LENGTH:
                walk(neighbor, start, path + (neighbor,), on_path | {neighbor})

    for node_id in graph.nodes:
        walk(node_id, node_id, (node_id,), frozenset((node_id,)))

    return rings
