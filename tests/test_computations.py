import pytest

from computations import (
    build_ledger,
    draft_record,
    equal_split,
    record_imbalance,
    remaining_amount,
    remove_expense,
    settlement_headlines,
    settlement_record,
    solve_settlements,
    summarize,
    upsert_expense,
    validate_record,
)
from models import ExpenseRecord, Transfer
from utils import EPSILON


def _record(rid, paid_by, shared_among, total=None):
    if total is None:
        total = sum(paid_by.values())
    return ExpenseRecord(id=rid, total=total, paid_by=paid_by, shared_among=shared_among)


def test_single_payer_shared_three_ways(dinner):
    ledger = build_ledger([dinner])
    assert ledger == {"A": 20.0, "B": -10.0, "C": -10.0}

    transfers = solve_settlements(ledger)
    assert transfers == [
        Transfer("B", "A", 10.0),
        Transfer("C", "A", 10.0),
    ]


def test_three_way_cycle_settles_to_nothing():
    expenses = [
        _record("1", {"A": 10.0}, {"B": 10.0}),
        _record("2", {"B": 10.0}, {"C": 10.0}),
        _record("3", {"C": 10.0}, {"A": 10.0}),
    ]
    ledger = build_ledger(expenses)
    assert ledger == {"A": 0.0, "B": 0.0, "C": 0.0}
    assert solve_settlements(ledger) == []


def test_empty_expense_list():
    assert build_ledger([]) == {}
    assert solve_settlements({}) == []


def test_conservation_for_balanced_records(trip):
    ledger = build_ledger(trip)
    assert sum(ledger.values()) == pytest.approx(0.0, abs=1e-9)
    assert ledger["A"] == pytest.approx(51.5)
    assert ledger["B"] == pytest.approx(-3.0)
    assert ledger["C"] == pytest.approx(-48.5)


def test_settling_drives_balances_to_zero(trip):
    transfers = solve_settlements(build_ledger(trip))
    assert transfers == [Transfer("C", "A", 48.5), Transfer("B", "A", 3.0)]

    settled = trip + [settlement_record(t, now=0) for t in transfers]
    for balance in build_ledger(settled).values():
        assert abs(balance) < EPSILON


def test_unbalanced_record_shifts_balances():
    record = _record("odd", {"A": 10.0}, {"B": 4.0})
    assert record_imbalance(record) == pytest.approx(6.0)
    assert build_ledger([record]) == {"A": 10.0, "B": -4.0}
    # residual credit with nobody left to pay it is dropped
    assert solve_settlements({"A": 10.0, "B": -4.0}) == [Transfer("B", "A", 4.0)]


def test_participant_on_one_side_only():
    expenses = [
        _record("1", {"A": 20.0}, {"B": 20.0}),
        _record("2", {"C": 5.0}, {"B": 5.0}),
    ]
    assert build_ledger(expenses) == {"A": 20.0, "B": -25.0, "C": 5.0}


def test_small_balances_are_excluded():
    balances = {"A": 10.0, "B": -10.005, "C": 0.005, "D": -0.009}
    transfers = solve_settlements(balances)
    assert transfers == [Transfer("B", "A", 10.0)]
    for t in transfers:
        assert "C" not in (t.debtor, t.creditor)
        assert "D" not in (t.debtor, t.creditor)


def test_greedy_matching_and_transfer_bound():
    balances = {"A": 50.0, "B": 30.0, "C": -20.0, "D": -25.0, "E": -35.0}
    transfers = solve_settlements(balances)
    assert transfers == [
        Transfer("E", "A", 35.0),
        Transfer("D", "A", 15.0),
        Transfer("D", "B", 10.0),
        Transfer("C", "B", 20.0),
    ]
    assert len(transfers) <= 5 - 1
    assert all(t.debtor != t.creditor for t in transfers)
    assert all(t.amount >= EPSILON for t in transfers)


def test_equal_magnitudes_ordered_by_name():
    expected = [Transfer("Amy", "Bob", 5.0), Transfer("Zoe", "Bob", 5.0)]
    assert solve_settlements({"Zoe": -5.0, "Amy": -5.0, "Bob": 10.0}) == expected
    assert solve_settlements({"Bob": 10.0, "Amy": -5.0, "Zoe": -5.0}) == expected


def test_transfer_amounts_rounded_to_cents():
    transfers = solve_settlements({"A": 10 / 3, "B": -10 / 3})
    assert transfers == [Transfer("B", "A", 3.33)]


def test_solver_does_not_mutate_balances():
    balances = {"A": 20.0, "B": -10.0, "C": -10.0}
    before = dict(balances)
    solve_settlements(balances)
    assert balances == before


def test_transfer_to_dict():
    assert Transfer("B", "A", 10.0).to_dict() == {"from": "B", "to": "A", "amount": 10.0}


def test_summarize(dinner):
    summary = summarize([dinner])
    assert list(summary) == ["A", "B", "C"]
    assert summary["A"] == {"paid": 30.0, "shared": 10.0, "net": 20.0}
    assert summary["B"] == {"paid": 0.0, "shared": 10.0, "net": -10.0}


def test_validate_record_accepts_balanced(dinner):
    assert validate_record(dinner) == []


def test_validate_record_reports_problems():
    record = ExpenseRecord(id="x", total=30.0, paid_by={"A": 30.0}, shared_among={"B": 20.0})
    problems = validate_record(record)
    assert len(problems) == 1
    assert "Shared amounts add up to 20.00" in problems[0]

    empty = ExpenseRecord(id="y", total=0.0, paid_by={"": 0.0})
    problems = validate_record(empty)
    assert "Participant names must not be empty." in problems
    assert "Add at least one person who shares the cost." in problems


def test_equal_split():
    assert equal_split(10.0, ["A", "B", "C"]) == {"A": 3.33, "B": 3.33, "C": 3.33}
    assert equal_split(10.0, []) == {}


def test_upsert_and_remove(dinner):
    other = _record("lunch", {"B": 12.0}, {"A": 6.0, "B": 6.0})
    expenses = upsert_expense([dinner], other)
    assert [e.id for e in expenses] == ["dinner", "lunch"]

    edited = ExpenseRecord(id="dinner", total=40.0, paid_by={"A": 40.0}, shared_among={"B": 40.0})
    replaced = upsert_expense(expenses, edited)
    assert [e.id for e in replaced] == ["dinner", "lunch"]
    assert replaced[0].total == 40.0
    assert expenses[0].total == 30.0

    assert [e.id for e in remove_expense(replaced, "dinner")] == ["lunch"]
    assert remove_expense(replaced, "missing") == replaced


def test_settlement_record_cancels_transfer():
    record = settlement_record(Transfer("B", "A", 10.0), now=123)
    assert record.description == "Settle: B → A"
    assert record.total == 10.0
    assert record.paid_by == {"B": 10.0}
    assert record.shared_among == {"A": 10.0}
    assert record.timestamp == 123
    assert record.id

    ledger = build_ledger([_record("1", {"A": 10.0}, {"B": 10.0}), record])
    assert solve_settlements(ledger) == []


def test_settlement_headlines():
    lines = settlement_headlines([Transfer("B", "A", 10.0), Transfer("C", "A", 2.5)], "€")
    assert lines == ["B owes A €10.00", "C owes A €2.50"]


def test_remaining_amount():
    assert remaining_amount(30.0, []) == 30.0
    assert remaining_amount(30.0, [10.0, 5.5]) == 14.5
    assert remaining_amount(10.0, [3.33, 3.33]) == 3.34
    assert remaining_amount(30.0, [30.0]) is None
    assert remaining_amount(30.0, [40.0]) is None


def test_draft_record_blank_description_is_absent():
    record = draft_record("   ", 30.0, {"A": 30.0}, {"B": 30.0})
    assert record.description is None
    assert record.id
    assert record.timestamp is not None
    assert record.time_key == "timestamp"

    named = draft_record(" Dinner ", 30.0, {"A": 30.0}, {"B": 30.0})
    assert named.description == "Dinner"


def test_draft_record_keeps_edited_identity():
    base = ExpenseRecord(
        id="old", total=5.0, paid_by={"A": 5.0}, shared_among={"A": 5.0},
        description="Old", timestamp=42, time_key="createdAt", extra={"currency": "EUR"},
    )
    record = draft_record("", 8.0, {"A": 8.0}, {"B": 8.0}, base=base)
    assert record.id == "old"
    assert record.timestamp == 42
    assert record.time_key == "createdAt"
    assert record.extra == {"currency": "EUR"}
    assert record.extra is not base.extra
    assert record.description is None
    assert record.total == 8.0
