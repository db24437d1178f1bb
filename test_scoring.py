from forensics.core.graph import build_graph
from forensics.core.scoring import compute_scores, suspicion_score
from forensics.models import FraudRing


def _ring(ring_id, pattern_type, members, risk=80.0):
    return FraudRing(
        ring_id=ring_id, pattern_type=pattern_type, risk_score=risk,
        members=tuple(members), detail="",
    )


def test_score_weights_and_cap():
    assert suspicion_score([]) == 0
    assert suspicion_score(["cycle", "cycle_length_3"]) == 50
    assert suspicion_score(["fan_in", "fan_in_aggregation", "high_velocity"]) == 45
    assert suspicion_score(["shell", "shell_layering"]) == 25
    assert suspicion_score(["cycle", "fan_in", "high_velocity", "shell"]) == 100


def test_patterns_accumulate_across_rings(make_tx):
    graph = build_graph([
        make_tx("A", "B"), make_tx("B", "C"), make_tx("C", "A"), make_tx("C", "D"),
    ])
    rings = [
        _ring("RING_001", "cycle", ["A", "B", "C"], risk=90.0),
        _ring("SHELL_001", "shell", ["C", "D"]),
    ]

    suspicious = compute_scores(graph, rings)

    assert [s.account_id for s in suspicious] == ["C", "A", "B", "D"]
    c = suspicious[0]
    assert c.suspicion_score == 75
    assert c.detected_patterns == ("cycle", "cycle_length_3", "shell", "shell_layering")
    assert c.ring_id == "RING_001"
    assert suspicious[-1].ring_id == "SHELL_001"
    assert graph.nodes["C"].risk_score == 75
    assert graph.nodes["C"].patterns == ["cycle", "cycle_length_3", "shell", "shell_layering"]


def test_fan_rings_add_high_velocity_once(make_tx):
    graph = build_graph([make_tx("H", "X"), make_tx("H", "Y")])
    rings = [
        _ring("FANOUT_001", "fan_out", ["H", "X", "Y"], risk=85.0),
        _ring("FANOUT_002", "fan_out", ["H", "X"], risk=85.0),
    ]

    suspicious = compute_scores(graph, rings)

    h = next(s for s in suspicious if s.account_id == "H")
    assert h.detected_patterns == ("fan_out", "fan_out_dispersal", "high_velocity")
    assert h.suspicion_score == 45
    assert h.ring_id == "FANOUT_001"


def test_cap_at_100(make_tx):
    graph = build_graph([make_tx("A", "B")])
    rings = [
        _ring("RING_001", "cycle", ["A", "B", "Z"]),
        _ring("FANIN_001", "fan_in", ["A", "B"]),
        _ring("SHELL_001", "shell", ["A", "B"]),
    ]

    suspicious = compute_scores(graph, rings)

    assert all(s.suspicion_score == 100 for s in suspicious)


def test_unflagged_accounts_score_zero(make_tx):
    graph = build_graph([make_tx("A", "B"), make_tx("C", "D")])

    suspicious = compute_scores(graph, [_ring("SHELL_001", "shell", ["A", "B"])])

    assert {s.account_id for s in suspicious} == {"A", "B"}
    assert graph.nodes["C"].risk_score == 0
    assert graph.nodes["C"].patterns == []


def test_ties_keep_flag_order(make_tx):
    graph = build_graph([make_tx("Z", "Y"), make_tx("Y", "X")])

    suspicious = compute_scores(graph, [_ring("SHELL_001", "shell", ["Y", "X", "Z"])])

    assert [s.account_id for s in suspicious] == ["Y", "X", "Z"]
