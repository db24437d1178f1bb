import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from . import config
from .core.graph import AdjacencyIndex, build_graph
from .core.ingest import transactions_from_frame, transactions_from_records
from .core.scoring import compute_scores
from .detectors.circular_fund_routing import detect_cycles
from .detectors.layered_shell_networks import detect_shells
from .detectors.smurfing_patterns import detect_smurfing
from .errors import AnalysisError, ForensicsError, InputTooLargeError
from .models import AnalysisResult, FraudRing, ResultSummary, Transaction

logger = logging.getLogger(__name__)

# Merge order is fixed: the scorer assigns each account the first ring that
# contains it, so ring_id depends on this order.
DETECTORS = (
    ("cycle", detect_cycles),
    ("smurfing", detect_smurfing),
    ("shell", detect_shells),
)


def _run_detectors(graph, index, parallel: bool) -> List[FraudRing]:
    if parallel:
        with ThreadPoolExecutor(max_workers=len(DETECTORS)) as pool:
            futures = [pool.submit(fn, graph, index) for _, fn in DETECTORS]
            results = [f.result() for f in futures]
    else:
        results = [fn(graph, index) for _, fn in DETECTORS]

    all_rings: List[FraudRing] = []
    for (name, _), rings in zip(DETECTORS, results):
        logger.debug("%s detector found %d rings", name, len(rings))
        all_rings.extend(rings)
    return all_rings


def analyze_transactions(
    transactions: Sequence[Transaction], parallel: Optional[bool] = None
) -> AnalysisResult:
    """
    Runs the full pipeline: graph -> index -> detectors -> scoring.

    All-or-nothing: any failure surfaces as an AnalysisError (or the more
    specific ForensicsError raised inside) and no partial result is returned.
    """
    transactions = list(transactions)
    if parallel is None:
        parallel = config.PARALLEL_DETECTORS
    if config.MAX_TRANSACTIONS and len(transactions) > config.MAX_TRANSACTIONS:
        raise InputTooLargeError(len(transactions), config.MAX_TRANSACTIONS)

    start_time = time.time()
    try:
        # 1. Graph construction
        graph = build_graph(transactions)
        index = AdjacencyIndex.from_graph(graph)

        # 2. Detection (read-only on graph + index)
        rings = _run_detectors(graph, index, parallel)

        # 3. Scoring (the only mutation, strictly after detection)
        suspicious = compute_scores(graph, rings)
        frozen_graph = graph.freeze()
    except ForensicsError:
        logger.exception("Analysis of %d transactions failed", len(transactions))
        raise
    except Exception as e:
        logger.exception("Analysis of %d transactions failed", len(transactions))
        raise AnalysisError(f"Analysis failed: {e}") from e

    processing_time = time.time() - start_time

    result = AnalysisResult(
        graph=frozen_graph,
        fraud_rings=tuple(rings),
        suspicious_accounts=suspicious,
        processing_time=processing_time,
        summary=ResultSummary(
            total_accounts=len(graph.nodes),
            flagged_accounts=len(suspicious),
            rings_detected=len(rings),
            total_transactions=len(transactions),
        ),
    )
    logger.info(
        "Analyzed %d transactions / %d accounts: %d rings, %d flagged in %.3fs",
        len(transactions), len(graph.nodes), len(rings), len(suspicious), processing_time,
    )
    return result


def analyze_records(records: Iterable[Mapping[str, Any]], parallel: Optional[bool] = None) -> AnalysisResult:
    return analyze_transactions(transactions_from_records(records), parallel=parallel)


def analyze_frame(df: pd.DataFrame, parallel: Optional[bool] = None) -> AnalysisResult:
    return analyze_transactions(transactions_from_frame(df), parallel=parallel)
