"""
FastAPI router for the analysis endpoints.
Accepts a JSON list of transactions, runs the detection pipeline and returns
the report (optionally with graph data for visualization).
"""
from typing import List

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from ..errors import AnalysisError, InputTooLargeError, InvalidTransactionError
from ..models import AnalysisResult, DetectionResponse, Transaction
from ..orchestrator import analyze_transactions
from ..report import build_report_payload, graph_payload

router = APIRouter()


def _run(transactions: List[Transaction]) -> AnalysisResult:
    try:
        return analyze_transactions(transactions)
    except InputTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except InvalidTransactionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except AnalysisError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/analyze", response_model=DetectionResponse)
def analyze(transactions: List[Transaction]):
    """Full detection results plus nodes/edges for the graph view."""
    result = _run(transactions)
    response = build_report_payload(result)
    response.graph_data = graph_payload(result)
    return response


@router.post("/report.json")
def download_report(transactions: List[Transaction]):
    """Returns only the JSON report, as a file download."""
    result = _run(transactions)
    payload = build_report_payload(result)
    return JSONResponse(
        content=payload.model_dump(exclude={"graph_data"}),
        headers={"Content-Disposition": "attachment; filename=fraud_report.json"},
    )


@router.get("/health")
def health_check():
    return {"status": "ok", "service": "Transaction Graph Forensics Engine"}
