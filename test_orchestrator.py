import pandas as pd
import pytest
from pydantic import ValidationError

from forensics import config, orchestrator
from forensics.errors import AnalysisError, InputTooLargeError, InvalidTransactionError
from forensics.orchestrator import analyze_frame, analyze_records, analyze_transactions


def _members(result):
    return {m for ring in result.fraud_rings for m in ring.members}


def test_triangle_end_to_end(triangle):
    result = analyze_transactions(triangle)

    assert len(result.fraud_rings) == 1
    assert result.fraud_rings[0].risk_score == 90
    for acc in result.suspicious_accounts:
        assert acc.detected_patterns == ("cycle", "cycle_length_3")
        assert acc.suspicion_score == 50
        assert acc.ring_id == "RING_001"
    assert result.summary.total_accounts == 3
    assert result.summary.flagged_accounts == 3
    assert result.summary.rings_detected == 1
    assert result.summary.total_transactions == 3


def test_fan_in_end_to_end(fan_in):
    result = analyze_transactions(fan_in)

    assert [r.pattern_type for r in result.fraud_rings] == ["fan_in"]
    hub = next(a for a in result.suspicious_accounts if a.account_id == "HUB")
    assert hub.detected_patterns == ("fan_in", "fan_in_aggregation", "high_velocity")
    assert hub.suspicion_score == 45
    assert result.summary.flagged_accounts == 11
    assert "CASHOUT" not in {a.account_id for a in result.suspicious_accounts}


def test_rings_merge_in_detector_order(mixed):
    result = analyze_transactions(mixed)

    assert [r.ring_id for r in result.fraud_rings] == ["RING_001", "FANIN_001", "SHELL_001"]
    assert result.suspicious_accounts[0].suspicion_score == 50
    assert result.suspicious_accounts[-1].suspicion_score == 25


def test_suspects_are_exactly_ring_members(mixed):
    result = analyze_transactions(mixed)

    ids = [a.account_id for a in result.suspicious_accounts]
    assert len(ids) == len(set(ids))
    assert set(ids) == _members(result)
    assert all(0 <= a.suspicion_score <= 100 for a in result.suspicious_accounts)
    assert all(m in result.graph.nodes for m in _members(result))
    scores = [a.suspicion_score for a in result.suspicious_accounts]
    assert scores == sorted(scores, reverse=True)


def test_analysis_is_deterministic(mixed):
    first = analyze_transactions(mixed)
    second = analyze_transactions(mixed)

    assert first.fraud_rings == second.fraud_rings
    assert first.suspicious_accounts == second.suspicious_accounts


def test_parallel_detectors_match_sequential(mixed):
    sequential = analyze_transactions(mixed, parallel=False)
    parallel = analyze_transactions(mixed, parallel=True)

    assert sequential.fraud_rings == parallel.fraud_rings
    assert sequential.suspicious_accounts == parallel.suspicious_accounts


def test_empty_input_is_a_valid_result():
    result = analyze_transactions([])

    assert len(result.graph.nodes) == 0
    assert result.graph.links == ()
    assert result.fraud_rings == ()
    assert result.suspicious_accounts == ()
    assert result.summary.total_accounts == 0
    assert result.summary.total_transactions == 0


def test_structural_anomalies_are_tolerated(make_tx):
    txs = [
        make_tx("A", "A"),
        make_tx("A", "B", amount=0.0, tx_id="DUP"),
        make_tx("B", "C", tx_id="DUP"),
        make_tx("C", "A", tx_id="DUP"),
    ]
    result = analyze_transactions(txs)

    assert result.summary.total_transactions == 4
    assert [r.pattern_type for r in result.fraud_rings] == ["cycle"]


def test_result_is_immutable(fan_in):
    result = analyze_transactions(fan_in)
    with pytest.raises(ValidationError):
        result.processing_time = 0.0
    with pytest.raises(ValidationError):
        result.graph.nodes["HUB"].risk_score = 0.0
    with pytest.raises(TypeError):
        result.graph.nodes["HUB"] = result.graph.nodes["CASHOUT"]
    with pytest.raises(AttributeError):
        result.graph.links.clear()
    with pytest.raises(AttributeError):
        result.graph.nodes["HUB"].patterns.append("cycle")

    assert result.graph.nodes["HUB"].risk_score == 45
    assert len(result.graph.links) == 11


def test_transaction_limit(monkeypatch, triangle):
    monkeypatch.setattr(config, "MAX_TRANSACTIONS", 2)
    with pytest.raises(InputTooLargeError):
        analyze_transactions(triangle)


def test_failures_are_not_partial(monkeypatch, triangle):
    def broken(graph, index):
        raise RuntimeError("detector exploded")

    monkeypatch.setattr(orchestrator, "DETECTORS", (("broken", broken),))
    with pytest.raises(AnalysisError, match="detector exploded"):
        analyze_transactions(triangle)


def test_analyze_records():
    records = [
        {"transaction_id": "T1", "sender_id": "A", "receiver_id": "B", "amount": 10, "timestamp": "2024-01-01T10:00:00"},
        {"transaction_id": "T2", "sender_id": "B", "receiver_id": "C", "amount": 10, "timestamp": "2024-01-01T11:00:00"},
        {"transaction_id": "T3", "sender_id": "C", "receiver_id": "A", "amount": 10, "timestamp": "2024-01-01T12:00:00"},
    ]
    result = analyze_records(records)
    assert result.summary.rings_detected == 1


def test_analyze_records_rejects_bad_timestamp():
    records = [
        {"transaction_id": "T1", "sender_id": "A", "receiver_id": "B", "amount": 10, "timestamp": "2024-01-01T10:00:00"},
        {"transaction_id": "T2", "sender_id": "B", "receiver_id": "C", "amount": 10, "timestamp": "yesterday-ish"},
    ]
    with pytest.raises(InvalidTransactionError) as excinfo:
        analyze_records(records)
    assert excinfo.value.row == 1


def test_analyze_frame():
    df = pd.DataFrame({
        "transaction_id": ["T1", "T2", "T3"],
        "sender_id": ["A", "B", "C"],
        "receiver_id": ["B", "C", "A"],
        "amount": [100.0, 100.0, 100.0],
        "timestamp": ["2024-01-01 10:00:00", "2024-01-01 11:00:00", "2024-01-01 12:00:00"],
    })
    result = analyze_frame(df)

    assert result.summary.rings_detected == 1
    assert result.graph.links[0].timestamp.hour == 10


def test_analyze_frame_rejects_bad_timestamp():
    df = pd.DataFrame({
        "transaction_id": ["T1"],
        "sender_id": ["A"],
        "receiver_id": ["B"],
        "amount": [100.0],
        "timestamp": ["not a date"],
    })
    with pytest.raises(InvalidTransactionError):
        analyze_frame(df)


def test_analyze_frame_accepts_mixed_timestamp_formats():
    df = pd.DataFrame({
        "transaction_id": ["T1", "T2", "T3"],
        "sender_id": ["A", "B", "C"],
        "receiver_id": ["B", "C", "A"],
        "amount": [100.0, 100.0, 100.0],
        "timestamp": ["2024-01-01 10:00:00", "2024-01-01T11:00:00Z", "2024-01-01T12:00:00+02:00"],
    })
    result = analyze_frame(df)

    assert result.summary.rings_detected == 1
    hours = [link.timestamp.hour for link in result.graph.links]
    assert hours == [10, 11, 10]
