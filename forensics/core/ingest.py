"""
Hand-off from the ingestion layer: turns already-validated rows into
Transaction objects. Nothing is filtered here; a row that cannot be converted
is an input-contract violation and fails the whole call.
"""
from typing import Any, Iterable, List, Mapping

import pandas as pd
from pydantic import ValidationError

from ..errors import InvalidTransactionError
from ..models import Transaction

TRANSACTION_COLUMNS = ["transaction_id", "sender_id", "receiver_id", "amount", "timestamp"]


def transactions_from_records(records: Iterable[Mapping[str, Any]]) -> List[Transaction]:
    transactions = []
    for row, record in enumerate(records):
        try:
            transactions.append(Transaction.model_validate(dict(record)))
        except ValidationError as exc:
            raise InvalidTransactionError(str(exc), row=row) from exc
    return transactions


def transactions_from_frame(df: pd.DataFrame) -> List[Transaction]:
    """Converts a transaction DataFrame (one row per transfer) into Transactions."""
    missing = set(TRANSACTION_COLUMNS) - set(df.columns)
    if missing:
        raise InvalidTransactionError(f"missing columns: {sorted(missing)}")

    df = df[TRANSACTION_COLUMNS].copy()
    # Rows may mix ISO forms and offsets; everything is normalised to UTC,
    # naive values included.
    try:
        df["timestamp"] = pd.to_datetime(df["timestamp"], format="mixed", utc=True)
    except (TypeError, ValueError) as exc:
        raise InvalidTransactionError(f"unparseable timestamp: {exc}") from exc
    missing_ts = df["timestamp"].isna().to_numpy().nonzero()[0]
    if len(missing_ts):
        raise InvalidTransactionError("missing timestamp", row=int(missing_ts[0]))
    for col in ("transaction_id", "sender_id", "receiver_id"):
        df[col] = df[col].astype(str)

    records = (
        {**row, "timestamp": row["timestamp"].to_pydatetime()}
        for row in df.to_dict(orient="records")
    )
    return transactions_from_records(records)
