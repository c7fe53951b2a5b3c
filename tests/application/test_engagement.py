"""Tests for the edge-triggered engagement rules."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from wastetrack.application.use_cases.notifications import (
    EngagementEvaluator,
    credit_milestone,
    default_rules,
)
from wastetrack.domain.entities import ActivityEntry, PayloadKind

BANGKOK = ZoneInfo("Asia/Bangkok")
TODAY = date(2026, 10, 18)


def _streak_log(days):
    start = datetime(2026, 10, 18, 12, tzinfo=BANGKOK)
    return [ActivityEntry(timestamp=start - timedelta(days=offset)) for offset in range(days)]


def _evaluate(evaluator, credits, log, fired):
    return evaluator.evaluate(credits, log, fired, today=TODAY, tz=BANGKOK)


def test_first_tree_fires_once_threshold_is_crossed():
    evaluator = EngagementEvaluator()

    result = _evaluate(evaluator, 520, [], set())

    assert [config.id for config in result.configs] == ["first-tree"]
    assert result.fired == {"first-tree"}
    config = result.configs[0]
    assert config.title == "Congratulations! You saved your first tree 🌳"
    assert config.data.kind is PayloadKind.MILESTONE
    assert config.data.details["totalCredits"] == 520
    assert config.requires_permission


def test_fired_rule_never_fires_again():
    evaluator = EngagementEvaluator()
    first = _evaluate(evaluator, 520, [], set())

    second = _evaluate(evaluator, 600, [], first.fired)

    assert second.configs == []
    assert second.fired == first.fired


def test_below_threshold_fires_nothing():
    result = _evaluate(EngagementEvaluator(), 499.9, [], set())

    assert result.configs == []
    assert result.fired == frozenset()


def test_input_fired_set_is_not_mutated():
    fired = {"three-day-streak"}

    result = _evaluate(EngagementEvaluator(), 800, _streak_log(3), fired)

    assert fired == {"three-day-streak"}
    assert result.fired == {"three-day-streak", "first-tree"}


def test_three_day_streak():
    result = _evaluate(EngagementEvaluator(), 0, _streak_log(3), set())

    assert [config.id for config in result.configs] == ["three-day-streak"]
    assert result.configs[0].data.kind is PayloadKind.STREAK
    assert result.configs[0].data.details["streak"] == 3


def test_week_streak_fires_both_streak_rules_in_order():
    result = _evaluate(EngagementEvaluator(), 0, _streak_log(7), set())

    assert [config.id for config in result.configs] == ["three-day-streak", "week-streak"]


def test_rules_follow_table_order():
    result = _evaluate(EngagementEvaluator(), 1000, _streak_log(7), set())

    assert [config.id for config in result.configs] == [
        "first-tree",
        "three-day-streak",
        "week-streak",
    ]


def test_custom_threshold():
    evaluator = EngagementEvaluator(default_rules(first_tree_credits=100))

    result = _evaluate(evaluator, 150, [], set())

    assert [config.id for config in result.configs] == ["first-tree"]


def test_duplicate_rule_ids_are_rejected():
    rule = credit_milestone("dup", 10, title="A", body="B")

    with pytest.raises(ValueError):
        EngagementEvaluator([rule, rule])
