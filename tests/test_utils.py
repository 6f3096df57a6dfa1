import os

import pytest

from utils import (
    amounts_match,
    app_dir,
    evaluate_amount,
    format_timestamp,
    is_settled,
    round_currency,
    safe_float,
)


def test_round_currency_half_up():
    assert round_currency(2.675) == 2.68
    assert round_currency(-1.005) == -1.01
    assert round_currency(10 / 3) == 3.33


def test_tolerance_helpers():
    assert is_settled(0.009)
    assert is_settled(-0.009)
    assert not is_settled(0.01)
    assert amounts_match(30.0, 30.004)
    assert not amounts_match(30.0, 30.02)


@pytest.mark.parametrize("text, expected", [
    ("12.5", 12.5),
    ("10+5*2", 20.0),
    ("(1 + 2) / 4", 0.75),
    ("-3", -3.0),
])
def test_evaluate_amount(text, expected):
    assert evaluate_amount(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", ["", "abc", "1/0", "2**3", "1..2", "()", "__import__('os')"])
def test_evaluate_amount_rejects(text):
    with pytest.raises(ValueError):
        evaluate_amount(text)


def test_safe_float_default():
    assert safe_float("nope", None) is None
    assert safe_float("nope") == 0.0
    assert safe_float("4*2") == 8.0


def test_format_timestamp():
    assert format_timestamp(None) == ""
    assert format_timestamp(10 ** 20) == ""
    assert len(format_timestamp(1700000000000)) == len("2023-11-14 22:13")


def test_app_dir_from_environment(tmp_path, monkeypatch):
    target = tmp_path / "data"
    monkeypatch.setenv("WHO_OWES_HOME", str(target))
    assert app_dir() == str(target)
    assert os.path.isdir(target)
