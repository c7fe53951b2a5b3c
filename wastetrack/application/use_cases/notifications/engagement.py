"""Edge-triggered milestone and streak notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, tzinfo
from typing import AbstractSet, Callable, Iterable, Sequence

from wastetrack.domain.entities import (
    STREAK_TAG,
    ActivityEntry,
    NotificationConfig,
    NotificationPayload,
    PayloadKind,
)

from .streak import calculate_streak

FIRST_TREE_CREDITS = 500


@dataclass(frozen=True)
class EngagementMetrics:
    """Values the rules are evaluated against."""

    total_credits: float
    streak: int


@dataclass(frozen=True)
class EngagementRule:
    """One-shot notification fired the first time ``is_met`` holds."""

    id: str
    kind: PayloadKind
    title: str
    body: str
    tag: str
    is_met: Callable[[EngagementMetrics], bool]
    url: str = "/diary"

    def build_config(self, metrics: EngagementMetrics) -> NotificationConfig:
        return NotificationConfig(
            id=self.id,
            title=self.title,
            body=self.body,
            tag=self.tag,
            requires_permission=True,
            data=NotificationPayload(
                kind=self.kind,
                url=self.url,
                details={
                    "rule": self.id,
                    "totalCredits": metrics.total_credits,
                    "streak": metrics.streak,
                },
            ),
        )


def credit_milestone(
    rule_id: str, threshold: float, *, title: str, body: str
) -> EngagementRule:
    return EngagementRule(
        id=rule_id,
        kind=PayloadKind.MILESTONE,
        title=title,
        body=body,
        tag="milestone",
        is_met=lambda metrics: metrics.total_credits >= threshold,
    )


def streak_milestone(rule_id: str, days: int, *, title: str, body: str) -> EngagementRule:
    return EngagementRule(
        id=rule_id,
        kind=PayloadKind.STREAK,
        title=title,
        body=body,
        tag=STREAK_TAG,
        is_met=lambda metrics: metrics.streak >= days,
    )


def default_rules(first_tree_credits: float = FIRST_TREE_CREDITS) -> tuple[EngagementRule, ...]:
    """Return the built-in rule table in evaluation order."""

    return (
        credit_milestone(
            "first-tree",
            first_tree_credits,
            title="Congratulations! You saved your first tree 🌳",
            body="You've saved your first tree equivalent! Keep going!",
        ),
        streak_milestone(
            "three-day-streak",
            3,
            title="Amazing streak! 🔥",
            body="3 days in a row! You're building a great habit!",
        ),
        streak_milestone(
            "week-streak",
            7,
            title="Week warrior streak! 💪",
            body="One full week of waste tracking! You're making a difference!",
        ),
    )


@dataclass(frozen=True)
class EngagementResult:
    """Notifications to send now and the fired set including them."""

    configs: list[NotificationConfig] = field(default_factory=list)
    fired: frozenset[str] = frozenset()


class EngagementEvaluator:
    """Turn level conditions into one-shot events using the fired set as memory."""

    def __init__(self, rules: Sequence[EngagementRule] | None = None) -> None:
        self._rules = tuple(rules) if rules is not None else default_rules()
        rule_ids = [rule.id for rule in self._rules]
        if len(rule_ids) != len(set(rule_ids)):
            raise ValueError("Engagement rule ids must be unique")

    @property
    def rules(self) -> tuple[EngagementRule, ...]:
        return self._rules

    def evaluate(
        self,
        total_credits: float,
        activity_log: Iterable[ActivityEntry],
        fired: AbstractSet[str],
        *,
        today: date | None = None,
        tz: tzinfo | None = None,
    ) -> EngagementResult:
        metrics = EngagementMetrics(
            total_credits=total_credits,
            streak=calculate_streak(activity_log, today=today, tz=tz),
        )

        updated = set(fired)
        configs: list[NotificationConfig] = []
        for rule in self._rules:
            if rule.id in updated or not rule.is_met(metrics):
                continue
            updated.add(rule.id)
            configs.append(rule.build_config(metrics))
        return EngagementResult(configs=configs, fired=frozenset(updated))


__all__ = [
    "EngagementEvaluator",
    "EngagementMetrics",
    "EngagementResult",
    "EngagementRule",
    "FIRST_TREE_CREDITS",
    "credit_milestone",
    "default_rules",
    "streak_milestone",
]
