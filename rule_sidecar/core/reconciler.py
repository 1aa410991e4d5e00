"""Decision logic keeping the target rule at the bottom of the list."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

__all__ = [
    "Action",
    "NoOp",
    "Reorder",
    "decide",
    "is_rule_at_bottom",
    "pin_to_bottom",
    "remove_rule",
]


@dataclass(slots=True, frozen=True)
class NoOp:
    """The list is already in the required order."""


@dataclass(slots=True, frozen=True)
class Reorder:
    """The list must be replaced.

    Attributes:
        rules: Full corrected list, target rule last.
    """

    rules: tuple[str, ...]


Action = NoOp | Reorder


def is_rule_at_bottom(rules: Sequence[str], target_rule: str) -> bool:
    """Return True if the last rule is exactly the target rule."""
    return bool(rules) and rules[-1] == target_rule


def remove_rule(rules: Sequence[str], target_rule: str) -> list[str]:
    """Return rules without any occurrence of the target, order preserved."""
    return [rule for rule in rules if rule != target_rule]


def pin_to_bottom(rules: Sequence[str], target_rule: str) -> list[str]:
    """Return rules with one target rule moved or appended to the end."""
    return [*remove_rule(rules, target_rule), target_rule]


def decide(rules: Sequence[str], target_rule: str) -> Action:
    """Decide whether the rule list needs to be rewritten.

    Comparison is exact string equality, no trimming or case folding.
    Only the last position is checked: when a reorder is needed, duplicate
    occurrences of the target collapse into the single trailing entry and a
    missing target is appended.

    Args:
        rules: Rules as currently stored remotely.
        target_rule: Rule that has to come last.

    Returns:
        NoOp if the target is already last, otherwise Reorder with the
        corrected list.
    """
    if is_rule_at_bottom(rules, target_rule):
        return NoOp()

    return Reorder(rules=tuple(pin_to_bottom(rules, target_rule)))
