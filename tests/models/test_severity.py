from __future__ import annotations

import itertools

import pytest

from migration_checker.models import Finding, Severity, combine, worse


def test_worse_picks_higher_rank() -> None:
    assert worse(Severity.OK, Severity.WARN) == Severity.WARN
    assert worse(Severity.CRITICAL, Severity.WARN) == Severity.CRITICAL
    assert worse(Severity.OK, Severity.OK) == Severity.OK


def test_worse_is_commutative_associative_and_idempotent() -> None:
    values = list(Severity)
    for a, b in itertools.product(values, repeat=2):
        assert worse(a, b) == worse(b, a)
        assert worse(a, a) == a
    for a, b, c in itertools.product(values, repeat=3):
        assert worse(worse(a, b), c) == worse(a, worse(b, c))


def test_combine_is_seeded_with_ok() -> None:
    assert combine([]) == Severity.OK
    assert combine([Severity.WARN]) == Severity.WARN
    assert combine(iter([Severity.OK, Severity.CRITICAL, Severity.WARN])) == Severity.CRITICAL


def test_from_value_accepts_names_and_colours() -> None:
    assert Severity.from_value("warn") == Severity.WARN
    assert Severity.from_value(" RED ") == Severity.CRITICAL
    assert Severity.from_value("green") == Severity.OK
    assert Severity.CRITICAL.color == "red"

    with pytest.raises(ValueError):
        Severity.from_value("purple")


def test_finding_without_messages_is_ok() -> None:
    finding = Finding.build(Severity.CRITICAL, "Title", [], "https://docs")

    assert finding.severity == Severity.OK
    assert finding.messages == []
    assert finding.passed


def test_finding_drops_empty_messages() -> None:
    finding = Finding.build(Severity.WARN, "Title", ["", "something"], "https://docs")

    assert finding.severity == Severity.WARN
    assert finding.messages == ["something"]
