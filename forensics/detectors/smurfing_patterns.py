"""
Smurfing detector: fan-in (many -> 1 aggregation) and fan-out (1 -> many
dispersal) accounts whose transfers cluster inside a 72-hour window.

False positive guard: accounts that are busy in both directions (merchants,
payroll) are never evaluated.
"""
import logging
from typing import Iterable, List

import numpy as np
import pandas as pd

from ..core.graph import AdjacencyIndex
from ..errors import InvalidTransactionError
from ..models import FraudRing, TransactionGraph

logger = logging.getLogger(__name__)

FAN_THRESHOLD = 10          # distinct counterparties and transfers inside the window
TIME_WINDOW_HOURS = 72
MAX_OPPOSITE_DEGREE = 2     # a fan-in hub may send at most this many transfers
MERCHANT_DEGREE = 5         # in and out degree both >= this -> legitimate hub
SMURFING_RISK_SCORE = 85.0


def has_high_velocity(timestamps: Iterable, count_threshold: int, window_hours: float) -> bool:
    """
    True if some `count_threshold` timestamps fall within `window_hours` of each other.

    Timestamps are sorted first, so only the span of each run of
    `count_threshold` consecutive sorted values needs checking. Original edge
    order does not matter.

    Accepts datetimes or ISO-8601 strings, naive or with an offset; all are
    compared in UTC. Unparseable values raise InvalidTransactionError.
    """
    timestamps = list(timestamps)
    if len(timestamps) < count_threshold:
        return False
    if count_threshold < 1:
        return True
    try:
        times = pd.to_datetime(timestamps, format="mixed", utc=True).tz_convert(None)
    except (TypeError, ValueError) as exc:
        raise InvalidTransactionError(f"unparseable timestamp in velocity window: {exc}") from exc

    times = np.sort(times.to_numpy())
    spans = times[count_threshold - 1:] - times[:len(times) - count_threshold + 1]
    window = pd.Timedelta(hours=window_hours).to_timedelta64()
    return bool((spans <= window).any())


def detect_smurfing(graph: TransactionGraph, index: AdjacencyIndex) -> List[FraudRing]:
    """Finds fan-in and fan-out hubs. A node may produce one ring of each kind."""
    rings: List[FraudRing] = []

    for node in graph.nodes.values():
        if node.in_degree >= MERCHANT_DEGREE and node.out_degree >= MERCHANT_DEGREE:
            logger.debug("Skipping %s: bidirectional high-volume account", node.id)
            continue

        # Fan-in: many senders -> 1 receiver
        if node.in_degree >= FAN_THRESHOLD and node.out_degree <= MAX_OPPOSITE_DEGREE:
            incoming = index.incoming(node.id)
            senders = list(dict.fromkeys(link.source for link in incoming))
            if len(senders) >= FAN_THRESHOLD and has_high_velocity(
                [link.timestamp for link in incoming], FAN_THRESHOLD, TIME_WINDOW_HOURS
            ):
                rings.append(FraudRing(
                    ring_id=f"FANIN_{len(rings) + 1:03d}",
                    pattern_type="fan_in",
                    risk_score=SMURFING_RISK_SCORE,
                    members=(node.id, *senders),
                    detail=f"Fan-in aggregator: {len(senders)} accounts → {node.id} within {TIME_WINDOW_HOURS}h window",
                ))

        # Fan-out: 1 sender -> many receivers
        if node.out_degree >= FAN_THRESHOLD and node.in_degree <= MAX_OPPOSITE_DEGREE:
            outgoing = index.outgoing(node.id)
            receivers = list(dict.fromkeys(link.target for link in outgoing))
            if len(receivers) >= FAN_THRESHOLD and has_high_velocity(
                [link.timestamp for link in outgoing], FAN_THRESHOLD, TIME_WINDOW_HOURS
            ):
                rings.append(FraudRing(
                    ring_id=f"FANOUT_{len(rings) + 1:03d}",
                    pattern_type="fan_out",
                    risk_score=SMURFING_RISK_SCORE,
                    members=(node.id, *receivers),
                    detail=f"Fan-out dispersal: {node.id} → {len(receivers)} accounts within {TIME_WINDOW_HOURS}h window",
                ))

    return rings
