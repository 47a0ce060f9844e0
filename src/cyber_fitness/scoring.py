"""Security scoring, progression levels and badges."""
import math
from typing import Optional

from cyber_fitness.conditions import evaluate
from cyber_fitness.facts import FactStore
from cyber_fitness.models import (
    ActionQuestion, Question, QuestionBank, ScaleQuestion, ScoreResult,
    SecurityGap, SecurityLevel, YesNoQuestion,
)

# Multiplier applied to a question's weight by security impact of its category
CATEGORY_WEIGHTS = {
    "system_security": 1.2,
    "password_security": 1.1,
    "data_protection": 1.0,
    "network_security": 0.9,
    "browser_security": 0.8,
    "email_security": 0.7,
    "physical_security": 0.6,
    "social_media": 0.5,
}

SECURITY_LEVELS = (
    SecurityLevel("getting_started", "Getting Started", 0, "Learning the basics of digital security"),
    SecurityLevel("security_aware", "Security Aware", 15, "You know the basics and have some protections in place"),
    SecurityLevel("well_protected", "Well Protected", 40, "Strong security habits are becoming second nature"),
    SecurityLevel("security_savvy", "Security Savvy", 70, "You have comprehensive security practices"),
    SecurityLevel("security_expert", "Security Expert", 90, "You have mastered digital security best practices"),
)

CRITICAL_WEIGHT = 8
CRITICAL_RATIO = 0.3
MEDIUM_RATIO = 0.6
ACHIEVEMENT_RATIO = 0.9

BADGES = {
    "quick-starter": "Completed 3 quick wins",
    "halfway-hero": "Reached a security score of 50",
}


def category_weight(category) -> float:
    return CATEGORY_WEIGHTS.get(category, 1.0)


def max_points(question: Question) -> float:
    return question.weight * category_weight(question.category)


def _is_yes(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("yes", "true")
    return False


def _as_number(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def question_points(question, value) -> float:
    """Points an answer value earns on a question. 0 for unknown questions."""
    if question is None:
        return 0.0
    maximum = max_points(question)
    if isinstance(question, YesNoQuestion):
        return maximum if _is_yes(value) else 0.0
    if isinstance(question, ScaleQuestion):
        number = _as_number(value)
        if number is None or not question.max_value:
            return 0.0
        # Out-of-range values are the content author's problem
        return (number / question.max_value) * maximum
    if isinstance(question, ActionQuestion):
        selected = question.option(value)
        if selected is None:
            return 0.0
        return selected.points * category_weight(question.category)
    return 0.0


def level_for_score(score: float) -> SecurityLevel:
    for level in sorted(SECURITY_LEVELS, key=lambda lvl: lvl.min_score, reverse=True):
        if level.min_score <= score:
            return level
    return SECURITY_LEVELS[0]


def next_level_progress(score: float) -> dict:
    current = level_for_score(score)
    higher = [lvl for lvl in SECURITY_LEVELS if lvl.min_score > current.min_score]
    if not higher:
        return {"current_level": current, "next_level": None, "points_needed": 0, "progress": 100.0}
    nxt = min(higher, key=lambda lvl: lvl.min_score)
    span = nxt.min_score - current.min_score
    progress = min(100.0, (score - current.min_score) / span * 100)
    return {
        "current_level": current,
        "next_level": nxt,
        "points_needed": max(0, nxt.min_score - score),
        "progress": round(progress, 1),
    }


def security_label(score: float) -> str:
    if score >= 90:
        return "Highly Secure"
    elif score >= 75:
        return "Well Protected"
    elif score >= 60:
        return "Moderately Secure"
    elif score >= 40:
        return "Vulnerable"
    return "At Risk"


def security_color(score: float) -> str:
    if score >= 75:
        return "green"
    elif score >= 60:
        return "yellow"
    elif score >= 40:
        return "dark_orange"
    return "red"


def _percent(actual: float, maximum: float) -> int:
    # half-up, not banker's rounding
    return math.floor(actual / maximum * 100 + 0.5) if maximum > 0 else 0


def score(bank: QuestionBank, answers: dict, facts: Optional[FactStore] = None) -> ScoreResult:
    """Score every bank question against the answer set.

    Unanswered domain questions still count toward the maximum, so missing
    answers always lower the percentage. When facts are given, unanswered
    questions whose conditions do not hold for the user are left out
    entirely. Suite questions only count once answered. Always a full
    recomputation.
    """
    total = 0.0
    maximum = 0.0
    points = {}
    domain_totals = {}
    gaps = []
    achievements = []
    critical = 0
    quick_wins_done = 0
    quick_wins_total = 0

    scored = [(d.id, q) for d in bank.domains for q in d.questions()]
    scored += [(s.id, q) for s in bank.suites for q in s.questions if q.id in answers]

    for bucket, question in scored:
        answer = answers.get(question.id)
        if answer is None and facts is not None and not evaluate(question.conditions, facts):
            continue
        q_max = max_points(question)
        q_actual = question_points(question, answer.value) if answer is not None else 0.0
        maximum += q_max
        total += q_actual
        points[question.id] = q_actual
        actual_sum, max_sum = domain_totals.get(bucket, (0.0, 0.0))
        domain_totals[bucket] = (actual_sum + q_actual, max_sum + q_max)

        if question.quick_win:
            quick_wins_total += 1
            if answer is not None:
                quick_wins_done += 1

        category = question.category or "other"
        high_weight = question.weight >= CRITICAL_WEIGHT
        if answer is None:
            if high_weight:
                critical += 1
                gaps.append(SecurityGap(
                    question.id, category, "critical", question.text,
                    "Complete this security assessment", answered=False,
                ))
            continue
        if high_weight and q_actual < q_max * CRITICAL_RATIO:
            critical += 1
            gaps.append(SecurityGap(
                question.id, category, "critical", question.text,
                question.action_hint or "Improve this security practice",
            ))
        elif q_actual < q_max * MEDIUM_RATIO:
            gaps.append(SecurityGap(
                question.id, category, "medium", question.text,
                question.action_hint or "Consider improving this",
            ))
        if q_max > 0 and q_actual >= q_max * ACHIEVEMENT_RATIO:
            text = f"Excellent {category} security!"
            if text not in achievements:
                achievements.append(text)

    overall = _percent(total, maximum)
    return ScoreResult(
        overall_score=overall,
        domain_scores={k: _percent(a, m) for k, (a, m) in domain_totals.items()},
        level=level_for_score(overall),
        quick_wins_completed=quick_wins_done,
        total_quick_wins=quick_wins_total,
        total_security_score=total,
        max_possible_score=maximum,
        question_points=points,
        critical_vulnerabilities=critical,
        security_gaps=tuple(gaps),
        achievements=tuple(achievements),
        answered_count=sum(1 for qid in answers if bank.get(qid) is not None),
    )


def earned_badges(result: ScoreResult) -> list[str]:
    badges = []
    if result.quick_wins_completed >= 3:
        badges.append("quick-starter")
    if result.overall_score >= 50:
        badges.append("halfway-hero")
    return badges
