from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from ..models import AccountNode, Link, Transaction, TransactionGraph


def build_graph(transactions: Iterable[Transaction]) -> TransactionGraph:
    """Builds a directed multigraph: one node per account, one link per transaction.

    Duplicate transaction ids, self-loops and zero amounts are kept as ordinary
    edges. Nodes are stored in first-seen order.
    """
    nodes: Dict[str, AccountNode] = {}
    links: List[Link] = []

    for tx in transactions:
        if tx.sender_id not in nodes:
            nodes[tx.sender_id] = AccountNode(id=tx.sender_id)
        if tx.receiver_id not in nodes:
            nodes[tx.receiver_id] = AccountNode(id=tx.receiver_id)

        sender = nodes[tx.sender_id]
        receiver = nodes[tx.receiver_id]
        sender.out_degree += 1
        sender.total_out += tx.amount
        receiver.in_degree += 1
        receiver.total_in += tx.amount

        links.append(Link(
            source=tx.sender_id,
            target=tx.receiver_id,
            amount=tx.amount,
            timestamp=tx.timestamp,
            transaction_id=tx.transaction_id,
        ))

    return TransactionGraph(nodes=nodes, links=links)


class AdjacencyIndex:
    """Lookup structures derived once from ``graph.links``.

    ``out_neighbors`` keeps one entry per edge, so a pair connected by three
    transactions appears three times. Detectors share a single instance and
    never mutate it.
    """

    def __init__(self, out_neighbors, by_source, by_target):
        self._out_neighbors = out_neighbors
        self._by_source = by_source
        self._by_target = by_target

    @classmethod
    def from_graph(cls, graph: TransactionGraph) -> "AdjacencyIndex":
        out_neighbors = defaultdict(list)
        by_source = defaultdict(list)
        by_target = defaultdict(list)
        for link in graph.links:
            out_neighbors[link.source].append(link.target)
            by_source[link.source].append(link)
            by_target[link.target].append(link)
        return cls(
            {k: tuple(v) for k, v in out_neighbors.items()},
            {k: tuple(v) for k, v in by_source.items()},
            {k: tuple(v) for k, v in by_target.items()},
        )

    def out_neighbors(self, account_id: str) -> Tuple[str, ...]:
        return self._out_neighbors.get(account_id, ())

    def outgoing(self, account_id: str) -> Tuple[Link, ...]:
        return self._by_source.get(account_id, ())

    def incoming(self, account_id: str) -> Tuple[Link, ...]:
        return self._by_target.get(account_id, ())
