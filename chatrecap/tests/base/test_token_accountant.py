from __future__ import annotations

import json

import pytest

from chatrecap.base.errors import InvalidInputError
from chatrecap.base.tokens import TokenAccountant, estimate_tokens


class _FailingOracle:
    def count(self, text):
        raise RuntimeError("encoding unavailable")


class _ConstOracle:
    def __init__(self, value):
        self.value = value

    def count(self, text):
        return self.value


def test_fallback_estimate_rounds_up():
    assert estimate_tokens("abcdefgh") == 2  # nosec B101
    assert estimate_tokens("abcdefghi") == 3  # nosec B101
    assert estimate_tokens("") == 0  # nosec B101


def test_failing_oracle_degrades_to_estimate():
    acc = TokenAccountant(_FailingOracle())
    assert acc.count("abcdefgh") == 2  # nosec B101


@pytest.mark.parametrize("bad", [0, -3, "12", 2.5, None, True])
def test_implausible_oracle_values_fall_back(bad):
    acc = TokenAccountant(_ConstOracle(bad))
    assert acc.count("abcdefgh") == 2  # nosec B101


def test_value_above_largest_ceiling_falls_back():
    acc = TokenAccountant(_ConstOracle(10_000), plausible_ceiling=4096)
    assert acc.count("abcdefgh") == 2  # nosec B101


def test_oracle_value_used_when_plausible():
    acc = TokenAccountant(_ConstOracle(7), plausible_ceiling=4096)
    assert acc.count("abcdefgh") == 7  # nosec B101


def test_no_oracle_always_estimates():
    assert TokenAccountant().count("a" * 10) == 3  # nosec B101


def test_non_string_input_rejected():
    with pytest.raises(InvalidInputError):
        TokenAccountant().count(42)  # type: ignore[arg-type]


def test_fallback_logs_warning_event(capsys):
    TokenAccountant(_FailingOracle()).count("hello there")
    lines = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.startswith("{")]
    events = [e for e in lines if e.get("event") == "tokens.fallback"]
    assert events and events[0]["level"] == "WARNING"  # nosec B101
    assert events[0]["tokens"] == 3  # nosec B101
