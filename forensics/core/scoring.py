"""
Suspicion scorer: turns detected rings into per-account patterns and a
0–100 suspicion score.

Score components:
  +50  cycle member
  +30  fan_in member
  +30  fan_out member
  +25  shell chain member
  +15  high velocity (member of any fan-in/fan-out ring)

Final score is capped at 100.
"""
from typing import Dict, List, Sequence, Tuple

from ..models import FraudRing, SuspiciousAccount, TransactionGraph

PATTERN_WEIGHTS = {
    "cycle": 50,
    "fan_in": 30,
    "fan_out": 30,
    "shell": 25,
    "high_velocity": 15,
}
MAX_SCORE = 100.0

_DESCRIPTIVE_PATTERNS = {
    "fan_in": "fan_in_aggregation",
    "fan_out": "fan_out_dispersal",
    "shell": "shell_layering",
}


def suspicion_score(patterns: Sequence[str]) -> float:
    score = sum(PATTERN_WEIGHTS.get(p, 0) for p in set(patterns))
    return min(float(score), MAX_SCORE)


def _descriptive_pattern(ring: FraudRing) -> str:
    if ring.pattern_type == "cycle":
        return f"cycle_length_{len(ring.members)}"
    return _DESCRIPTIVE_PATTERNS[ring.pattern_type]


def compute_scores(
    graph: TransactionGraph, rings: Sequence[FraudRing]
) -> Tuple[SuspiciousAccount, ...]:
    """
    Writes patterns and risk scores onto the graph's nodes and returns the
    suspicious-account list, sorted by descending score.

    `rings` must already be in merge order (cycle -> smurfing -> shell); an
    account's ring_id is the first ring in that order that contains it.
    """
    first_ring: Dict[str, str] = {}  # insertion order doubles as flag order

    for ring in rings:
        descriptive = _descriptive_pattern(ring)
        for member in ring.members:
            node = graph.nodes.get(member)
            if node is None:
                continue
            node.add_pattern(ring.pattern_type)
            node.add_pattern(descriptive)
            if ring.pattern_type in ("fan_in", "fan_out"):
                node.add_pattern("high_velocity")
            first_ring.setdefault(member, ring.ring_id)

    for node in graph.nodes.values():
        node.risk_score = suspicion_score(node.patterns)

    suspicious: List[SuspiciousAccount] = [
        SuspiciousAccount(
            account_id=account_id,
            suspicion_score=graph.nodes[account_id].risk_score,
            detected_patterns=tuple(graph.nodes[account_id].patterns),
            ring_id=ring_id,
        )
        for account_id, ring_id in first_ring.items()
    ]
    # sort() is stable: equal scores keep flag order
    suspicious.sort(key=lambda a: -a.suspicion_score)
    return tuple(suspicious)
