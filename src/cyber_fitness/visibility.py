"""Resolve which questions are visible and which suites are unlocked."""
from dataclasses import dataclass
from datetime import datetime

from cyber_fitness.conditions import evaluate
from cyber_fitness.facts import FactStore
from cyber_fitness.models import QuestionBank


@dataclass(frozen=True)
class Visibility:
    visible_question_ids: frozenset = frozenset()
    unlocked_suite_ids: frozenset = frozenset()


def unlocked_suites(bank: QuestionBank, facts: FactStore) -> frozenset:
    return frozenset(s.id for s in bank.suites if evaluate(s.gates, facts))


def resolve(bank: QuestionBank, facts: FactStore) -> Visibility:
    """Recompute visibility from scratch for the given facts.

    Suite questions are candidates only once their suite is unlocked. A fact
    value that satisfies two disjoint include sets makes both sets of
    questions visible.
    """
    unlocked = unlocked_suites(bank, facts)
    visible = set()
    for question in bank.domain_questions():
        if evaluate(question.conditions, facts):
            visible.add(question.id)
    for suite in bank.suites:
        if suite.id not in unlocked:
            continue
        for question in suite.questions:
            if evaluate(question.conditions, facts):
                visible.add(question.id)
    return Visibility(frozenset(visible), unlocked)


def available_question_ids(bank: QuestionBank, visibility: Visibility, answers: dict, now: datetime) -> list[str]:
    """Visible questions that are unanswered or whose answer has expired, in bank order."""
    result = []
    for question in bank.all_questions():
        if question.id not in visibility.visible_question_ids:
            continue
        answer = answers.get(question.id)
        if answer is None or answer.is_expired(now):
            result.append(question.id)
    return result
