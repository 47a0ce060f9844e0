"""Condition evaluation: include/exclude predicates over named facts."""
from dataclasses import dataclass

from cyber_fitness.facts import WILDCARD, FactStore, matches_expected
from cyber_fitness.models import Conditions


@dataclass(frozen=True)
class ConditionResult:
    visible: bool
    reason: str = ""


def _clauses(conditions, key: str) -> dict:
    if conditions is None:
        return {}
    if isinstance(conditions, Conditions):
        clauses = getattr(conditions, key)
    elif isinstance(conditions, dict):
        clauses = conditions.get(key)
    else:
        return {}
    return clauses if isinstance(clauses, dict) else {}


def _matches(facts: FactStore, name: str, expected) -> bool:
    fact = facts.get_fact(name)
    if fact is None:
        return False
    if isinstance(expected, str) and expected == WILDCARD:
        return True
    return matches_expected(fact.value, expected)


def explain(conditions, facts: FactStore) -> ConditionResult:
    """Evaluate conditions and report the first clause that decided the outcome.

    Include clauses are ANDed and fail closed on a missing fact. Exclude
    clauses are ORed: any single match hides. Absent or malformed conditions
    are always visible.
    """
    for name, expected in _clauses(conditions, "include").items():
        if name not in facts:
            return ConditionResult(False, f"include {name}: expected {expected!r}, fact not set")
        if not _matches(facts, name, expected):
            return ConditionResult(False, f"include {name}: expected {expected!r}, got {facts.get(name)!r}")

    for name, expected in _clauses(conditions, "exclude").items():
        if _matches(facts, name, expected):
            return ConditionResult(False, f"exclude {name}: matched {facts.get(name)!r}")

    return ConditionResult(True)


def evaluate(conditions, facts: FactStore) -> bool:
    return explain(conditions, facts).visible


def visible_options(question, facts: FactStore) -> list:
    """Answer options of a question whose own conditions hold."""
    return [opt for opt in question.options if evaluate(opt.conditions, facts)]
