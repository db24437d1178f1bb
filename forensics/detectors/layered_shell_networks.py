from typing import List, Set

from ..core.graph import AdjacencyIndex
from ..models import FraudRing, TransactionGraph

SHELL_MIN_TRANSACTIONS = 2
SHELL_MAX_TRANSACTIONS = 3
MIN_CHAIN_PREFIX = 3  # origin + at least 2 shell hops before the terminal account
SHELL_RISK_SCORE = 80.0


def shell_candidates(graph: TransactionGraph) -> Set[str]:
    """Pass-through accounts: 2-3 transactions in total, at least one in and one out."""
    return {
        node.id for node in graph.nodes.values()
        if SHELL_MIN_TRANSACTIONS <= node.total_transactions <= SHELL_MAX_TRANSACTIONS
        and node.in_degree > 0 and node.out_degree > 0
    }


def detect_shells(graph: TransactionGraph, index: AdjacencyIndex) -> List[FraudRing]:
    """
    Layered shell networks: origin -> shell -> shell -> ... -> terminal.

    Traversal starts only at non-shell accounts, moves forward only through
    shell candidates not already on the path, and stops at the first
    non-shell account. Chains are deduplicated by their exact member
    sequence; overlapping chains are all reported.
    """
    shells = shell_candidates(graph)
    rings: List[FraudRing] = []
    recorded: Set[str] = set()

    for origin in graph.nodes:
        if origin in shells:
            continue

        # Explicit frame stack; visits neighbors in the same order as recursion.
        path = [origin]
        on_path = {origin}
        frames = [iter(index.out_neighbors(origin))]
        while frames:
            for neighbor in frames[-1]:
                if neighbor in on_path:
                    continue
                if neighbor in shells:
                    path.append(neighbor)
                    on_path.add(neighbor)
                    frames.append(iter(index.out_neighbors(neighbor)))
                    break
                if len(path) >= MIN_CHAIN_PREFIX and any(p in shells for p in path):
                    chain = (*path, neighbor)
                    key = "→".join(chain)
                    if key not in recorded:
                        recorded.add(key)
                        rings.append(FraudRing(
                            ring_id=f"SHELL_{len(rings) + 1:03d}",
                            pattern_type="shell",
                            risk_score=SHELL_RISK_SCORE,
                            members=chain,
                            detail=f"Layered shell chain: {' → '.join(chain)} ({len(chain) - 1} hops)",
                        ))
            else:
                frames.pop()
                on_path.discard(path.pop())

    return rings
