from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from typing import List, Optional, Any, Dict, Iterable, Mapping, Tuple
from datetime import datetime
from types import MappingProxyType

import networkx as nx

# ── Analysis model ─────────────────────────────────────────────────────────────

class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction_id: str
    sender_id: str
    receiver_id: str
    amount: float
    timestamp: datetime

class AccountNode(BaseModel):
    """An account in the transfer graph.

    Degrees and totals are filled in by the graph builder; ``risk_score`` and
    ``patterns`` are written once by the scorer after every detector returns.
    """
    id: str
    in_degree: int = 0
    out_degree: int = 0
    total_in: float = 0.0
    total_out: float = 0.0
    risk_score: float = 0.0
    patterns: List[str] = Field(default_factory=list)

    @property
    def total_transactions(self) -> int:
        return self.in_degree + self.out_degree

    def add_pattern(self, pattern: str) -> None:
        if pattern not in self.patterns:
            self.patterns.append(pattern)

class Link(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    amount: float
    timestamp: datetime
    transaction_id: str

def _to_networkx(nodes: Iterable, links: Iterable[Link]) -> nx.MultiDiGraph:
    G = nx.MultiDiGraph()
    for node in nodes:
        G.add_node(
            node.id,
            in_degree=node.in_degree,
            out_degree=node.out_degree,
            total_in=node.total_in,
            total_out=node.total_out,
            risk_score=node.risk_score,
            patterns=list(node.patterns),
        )
    for link in links:
        G.add_edge(
            link.source,
            link.target,
            amount=link.amount,
            timestamp=link.timestamp,
            transaction_id=link.transaction_id,
        )
    return G

class TransactionGraph(BaseModel):
    """Working graph, mutable only while an analysis is running."""
    nodes: Dict[str, AccountNode] = Field(default_factory=dict)
    links: List[Link] = Field(default_factory=list)

    def to_networkx(self) -> nx.MultiDiGraph:
        """Expose the graph as a MultiDiGraph (one edge per transaction)."""
        return _to_networkx(self.nodes.values(), self.links)

    def freeze(self) -> "AnalysisGraph":
        accounts = tuple(AccountSnapshot(**node.model_dump()) for node in self.nodes.values())
        return AnalysisGraph(accounts=accounts, links=tuple(self.links))

class AccountSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    in_degree: int
    out_degree: int
    total_in: float
    total_out: float
    risk_score: float
    patterns: Tuple[str, ...]

    @property
    def total_transactions(self) -> int:
        return self.in_degree + self.out_degree

class AnalysisGraph(BaseModel):
    """Read-only graph handed out with an AnalysisResult.

    ``nodes`` is a read-only id -> AccountSnapshot view in first-seen order.
    """
    model_config = ConfigDict(frozen=True)

    accounts: Tuple[AccountSnapshot, ...] = ()
    links: Tuple[Link, ...] = ()

    _nodes: Mapping[str, AccountSnapshot] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._nodes = MappingProxyType({a.id: a for a in self.accounts})

    @property
    def nodes(self) -> Mapping[str, AccountSnapshot]:
        return self._nodes

    def to_networkx(self) -> nx.MultiDiGraph:
        return _to_networkx(self.accounts, self.links)

class FraudRing(BaseModel):
    model_config = ConfigDict(frozen=True)

    ring_id: str
    pattern_type: str  # cycle | fan_in | fan_out | shell
    risk_score: float
    members: Tuple[str, ...]
    detail: str

class SuspiciousAccount(BaseModel):
    model_config = ConfigDict(frozen=True)

    account_id: str
    suspicion_score: float
    detected_patterns: Tuple[str, ...]
    ring_id: Optional[str] = None

class ResultSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_accounts: int
    flagged_accounts: int
    rings_detected: int
    total_transactions: int

class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    graph: AnalysisGraph
    fraud_rings: Tuple[FraudRing, ...]
    suspicious_accounts: Tuple[SuspiciousAccount, ...]
    processing_time: float
    summary: ResultSummary

# ── Export schema ──────────────────────────────────────────────────────────────

class AccountSuspicion(BaseModel):
    account_id: str
    suspicion_score: float
    detected_patterns: List[str]
    ring_id: Optional[str] = None

class FraudRingReport(BaseModel):
    ring_id: str
    member_accounts: List[str]
    pattern_type: str
    risk_score: float

class AnalysisSummary(BaseModel):
    total_accounts_analyzed: int
    suspicious_accounts_flagged: int
    fraud_rings_detected: int
    processing_time_seconds: float

class DetectionResponse(BaseModel):
    suspicious_accounts: List[AccountSuspicion]
    fraud_rings: List[FraudRingReport]
    summary: AnalysisSummary
    graph_data: Optional[Dict[str, Any]] = None
