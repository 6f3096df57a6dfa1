import pytest

from models import ExpenseRecord


@pytest.fixture
def dinner():
    """A paid 30 for three people"""
    return ExpenseRecord(
        id="dinner",
        description="Dinner",
        total=30.0,
        paid_by={"A": 30.0},
        shared_among={"A": 10.0, "B": 10.0, "C": 10.0},
        timestamp=1700000000000,
    )


@pytest.fixture
def trip():
    """Two uneven expenses with cent-level splits"""
    return [
        ExpenseRecord(
            id="hotel",
            total=100.0,
            paid_by={"A": 100.0},
            shared_among={"A": 33.33, "B": 33.33, "C": 33.34},
        ),
        ExpenseRecord(
            id="taxi",
            total=45.5,
            paid_by={"B": 45.5},
            shared_among={"A": 15.17, "B": 15.17, "C": 15.16},
        ),
    ]
