"""Urgency ranking of open questions and today's task selection."""
from dataclasses import dataclass
from typing import Optional

from cyber_fitness.facts import FactStore
from cyber_fitness.models import ActionQuestion, Question

HIGH_IMPACT_KEYWORDS = [
    "password", "update", "antivirus", "firewall", "backup",
    "two_factor", "biometric", "lock", "wifi", "vpn",
]

RECOMMENDED_PATTERNS = [
    "password_manager", "automatic_updates", "two_factor",
    "backup_strategy", "wifi_security", "browser_security",
]

# platform -> id tokens that refer to it
PLATFORM_TOKENS = {
    "windows": ("windows",),
    "mac": ("mac", "macos"),
    "linux": ("linux",),
    "ios": ("ios", "iphone", "ipad"),
    "android": ("android",),
}

# facts whose value names the user's platform
PLATFORM_FACTS = ("os", "os_detected", "mobile_os", "device_os")

DEVICE_BONUS = 15
HIGH_IMPACT_BONUS = 20
RECOMMENDED_BONUS = 25
EASY_WIN_BONUS = 30
MISSING_PLATFORM_PENALTY = 50

CATEGORY_ORDER = {
    "todays_task": 0,
    "high_impact_recommended": 1,
    "recommended": 2,
    "high_impact": 3,
    "standard": 4,
}

TASK_REASONS = [
    ("password", "Strong passwords are your first line of defense - let's get this sorted!"),
    ("update", "Keeping things updated prevents most security issues automatically."),
    ("lock", "A locked screen is basic but critical protection for your data."),
    ("backup", "Backups save you from disasters - worth setting up today!"),
]
DEFAULT_TASK_REASON = "This is a quick security win that makes a big difference!"


@dataclass(frozen=True)
class Priority:
    level: str
    urgency_score: int
    is_recommended: bool
    is_high_impact: bool
    is_easy_win: bool


@dataclass(frozen=True)
class PrioritizedQuestion:
    question: Question
    priority: Priority
    difficulty: int
    estimated_minutes: int
    category: str

    @property
    def id(self) -> str:
        return self.question.id


@dataclass(frozen=True)
class TodaysTask:
    question: PrioritizedQuestion
    reason: str
    estimated_time: str


def user_platforms(facts: FactStore) -> set[str]:
    """Platforms the device facts say the user has.

    Read from platform-valued facts (``os``, ``mobile_os``...) and from
    boolean ``has_<platform>`` facts.
    """
    platforms = set()
    for name in PLATFORM_FACTS:
        value = facts.get(name)
        if isinstance(value, str) and value.lower() in PLATFORM_TOKENS:
            platforms.add(value.lower())
    for platform in PLATFORM_TOKENS:
        if facts.get(f"has_{platform}") is True:
            platforms.add(platform)
    return platforms


def _referenced_platforms(question_id: str) -> set[str]:
    tokens = set(question_id.lower().split("_"))
    return {p for p, aliases in PLATFORM_TOKENS.items() if tokens.intersection(aliases)}


def _is_quick(question: Question) -> bool:
    if question.quick_win:
        return True
    if any("quick" in tag.lower() for tag in question.tags):
        return True
    return "quick" in question.text.lower()


def priority_level(urgency: int) -> str:
    if urgency >= 80:
        return "critical"
    elif urgency >= 60:
        return "high"
    elif urgency >= 40:
        return "medium"
    return "low"


def question_priority(question: Question, facts: FactStore) -> Priority:
    urgency = question.weight * 2
    qid = question.id.lower()
    text = question.text.lower()

    platforms = user_platforms(facts)
    referenced = _referenced_platforms(qid)
    if referenced & platforms:
        urgency += DEVICE_BONUS
    # Only penalise when the device facts actually tell us something
    if platforms and referenced and not referenced & platforms:
        urgency -= MISSING_PLATFORM_PENALTY

    is_high_impact = any(k in qid or k in text for k in HIGH_IMPACT_KEYWORDS)
    if is_high_impact:
        urgency += HIGH_IMPACT_BONUS

    is_recommended = any(p in qid for p in RECOMMENDED_PATTERNS)
    if is_recommended:
        urgency += RECOMMENDED_BONUS

    is_easy_win = is_high_impact and is_recommended and _is_quick(question)
    if is_easy_win:
        urgency += EASY_WIN_BONUS

    clamped = int(min(100, max(0, urgency)))
    return Priority(
        level=priority_level(clamped),
        urgency_score=clamped,
        is_recommended=is_recommended,
        is_high_impact=is_high_impact,
        is_easy_win=is_easy_win,
    )


def difficulty_score(question: Question) -> int:
    """1 = very easy, 5 = complex."""
    text = question.text.lower()
    difficulty = 1
    if "configure" in text or "install" in text:
        difficulty += 1
    if "advanced" in text or "technical" in text:
        difficulty += 2
    return difficulty


def _category(priority: Priority) -> str:
    if priority.is_easy_win:
        return "todays_task"
    if priority.is_high_impact and priority.is_recommended:
        return "high_impact_recommended"
    if priority.is_recommended:
        return "recommended"
    if priority.is_high_impact:
        return "high_impact"
    return "standard"


def prioritize(question: Question, facts: FactStore) -> PrioritizedQuestion:
    priority = question_priority(question, facts)
    difficulty = difficulty_score(question)
    minutes = difficulty * 5 if isinstance(question, ActionQuestion) else 2
    return PrioritizedQuestion(
        question=question,
        priority=priority,
        difficulty=difficulty,
        estimated_minutes=minutes,
        category=_category(priority),
    )


def rank_questions(questions: list, facts: FactStore) -> list[PrioritizedQuestion]:
    """Prioritise and sort: category tier, urgency desc, effort asc."""
    ranked = [prioritize(q, facts) for q in questions]
    ranked.sort(key=lambda p: (
        CATEGORY_ORDER[p.category],
        -p.priority.urgency_score,
        p.difficulty,
        p.estimated_minutes,
    ))
    return ranked


def group_by_level(ranked: list) -> dict:
    groups = {"critical": [], "high": [], "medium": [], "low": []}
    for item in ranked:
        groups[item.priority.level].append(item)
    return groups


def todays_task(ranked: list) -> Optional[TodaysTask]:
    """The top-ranked easy win, or None if nothing qualifies."""
    for item in ranked:
        if item.priority.is_easy_win and item.difficulty <= 2 and item.estimated_minutes <= 10:
            reason = DEFAULT_TASK_REASON
            for keyword, text in TASK_REASONS:
                if keyword in item.id:
                    reason = text
                    break
            return TodaysTask(question=item, reason=reason, estimated_time=f"{item.estimated_minutes} min")
    return None
