import datetime
import itertools

import pytest

from forensics.models import Transaction

BASE_TIME = datetime.datetime(2024, 1, 1, 10, 0, 0)


@pytest.fixture
def make_tx():
    """Factory for transactions: make_tx("A", "B", minutes=30)."""
    counter = itertools.count(1)

    def _make(sender, receiver, amount=100.0, minutes=0, hours=0, tx_id=None):
        n = next(counter)
        return Transaction(
            transaction_id=tx_id or f"TX_{n:04d}",
            sender_id=sender,
            receiver_id=receiver,
            amount=amount,
            timestamp=BASE_TIME + datetime.timedelta(minutes=minutes, hours=hours),
        )

    return _make


@pytest.fixture
def triangle(make_tx):
    return [
        make_tx("A", "B", minutes=0),
        make_tx("B", "C", minutes=60),
        make_tx("C", "A", minutes=120),
    ]


@pytest.fixture
def fan_in(make_tx):
    """10 senders -> HUB inside 10 hours, HUB forwards once."""
    txs = [make_tx(f"SMURF_{i:02d}", "HUB", amount=900.0, hours=i) for i in range(10)]
    txs.append(make_tx("HUB", "CASHOUT", amount=8500.0, hours=11))
    return txs


@pytest.fixture
def shell_chain(make_tx):
    return [
        make_tx("ORIGIN", "SH1", amount=5000.0, hours=0),
        make_tx("SH1", "SH2", amount=4990.0, hours=1),
        make_tx("SH2", "DEST", amount=4980.0, hours=2),
    ]


@pytest.fixture
def mixed(triangle, fan_in, shell_chain):
    return triangle + fan_in + shell_chain
