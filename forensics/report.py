"""
Export mapping for an AnalysisResult.

`build_report_payload` produces the downloadable JSON report; its field names
and nesting are a compatibility surface for downstream consumers.
`graph_payload` produces nodes/edges for the visualization layer, with edges
collapsed per account pair.
"""
from typing import Any, Dict

from .models import (
    AccountSuspicion, AnalysisResult, AnalysisSummary, DetectionResponse, FraudRingReport,
)


def build_report_payload(result: AnalysisResult) -> DetectionResponse:
    suspicious = [
        AccountSuspicion(
            account_id=acc.account_id,
            suspicion_score=round(float(acc.suspicion_score), 1),
            detected_patterns=list(acc.detected_patterns),
            ring_id=acc.ring_id,
        )
        for acc in result.suspicious_accounts
    ]

    rings = [
        FraudRingReport(
            ring_id=ring.ring_id,
            member_accounts=list(ring.members),
            pattern_type=ring.pattern_type,
            risk_score=round(float(ring.risk_score), 1),
        )
        for ring in result.fraud_rings
    ]

    summary = AnalysisSummary(
        total_accounts_analyzed=result.summary.total_accounts,
        suspicious_accounts_flagged=result.summary.flagged_accounts,
        fraud_rings_detected=result.summary.rings_detected,
        processing_time_seconds=round(result.processing_time, 2),
    )

    return DetectionResponse(
        suspicious_accounts=suspicious,
        fraud_rings=rings,
        summary=summary,
    )


def graph_payload(result: AnalysisResult) -> Dict[str, Any]:
    G = result.graph.to_networkx()
    first_ring = {acc.account_id: acc.ring_id for acc in result.suspicious_accounts}

    nodes_data = []
    for node, data in G.nodes(data=True):
        nodes_data.append({
            "id": node,
            "suspicion_score": data["risk_score"],
            "ring_id": first_ring.get(node),
            "patterns": data["patterns"],
            "total_transactions": data["in_degree"] + data["out_degree"],
            "in_degree": data["in_degree"],
            "out_degree": data["out_degree"],
            "is_suspicious": node in first_ring,
        })

    # Collapse parallel transactions into one edge per pair
    pairs: Dict[tuple, Dict[str, Any]] = {}
    for src, dst, data in G.edges(data=True):
        edge = pairs.setdefault((src, dst), {
            "source": src,
            "target": dst,
            "total_amount": 0.0,
            "transaction_count": 0,
        })
        edge["total_amount"] += data["amount"]
        edge["transaction_count"] += 1

    edges_data = []
    for edge in pairs.values():
        edge["total_amount"] = round(edge["total_amount"], 2)
        edges_data.append(edge)

    return {"nodes": nodes_data, "edges": edges_data}
