"""Data classes for the assessment domain model."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

FactValue = Union[str, bool, int, float]

QUESTION_TYPES = ("YN", "SCALE", "ACTION")


@dataclass(frozen=True)
class Fact:
    name: str
    value: FactValue
    source: str
    timestamp: datetime

    @property
    def kind(self) -> str:
        # bool is checked first since it subclasses int
        if isinstance(self.value, bool):
            return "boolean"
        if isinstance(self.value, (int, float)):
            return "number"
        return "string"


@dataclass(frozen=True)
class Conditions:
    include: dict = field(default_factory=dict)
    exclude: dict = field(default_factory=dict)


@dataclass(frozen=True)
class AnswerOption:
    id: str
    text: str = ""
    facts: dict = field(default_factory=dict)
    points: float = 0
    feedback: str = ""
    conditions: Optional[Conditions] = None


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    weight: float = 5
    category: Optional[str] = None
    conditions: Optional[Conditions] = None
    options: tuple = ()
    quick_win: bool = False
    tags: tuple = ()
    emits: Optional[str] = None
    description: str = ""
    action_hint: str = ""
    domain_id: Optional[str] = None
    level: Optional[int] = None
    suite_id: Optional[str] = None

    type = ""

    def option(self, option_id) -> Optional[AnswerOption]:
        """Return the option whose id matches the answer value, if any."""
        if isinstance(option_id, bool):
            option_id = "yes" if option_id else "no"
        for opt in self.options:
            if opt.id == str(option_id):
                return opt
        return None


@dataclass(frozen=True)
class YesNoQuestion(Question):
    type = "YN"


@dataclass(frozen=True)
class ScaleQuestion(Question):
    min_value: int = 1
    max_value: int = 5

    type = "SCALE"


@dataclass(frozen=True)
class ActionQuestion(Question):
    type = "ACTION"


@dataclass(frozen=True)
class Level:
    level: int
    questions: tuple = ()


@dataclass(frozen=True)
class Domain:
    id: str
    title: str
    levels: tuple = ()

    def questions(self) -> list:
        return [q for lvl in self.levels for q in lvl.questions]


@dataclass(frozen=True)
class Suite:
    id: str
    title: str
    gates: Conditions = field(default_factory=Conditions)
    questions: tuple = ()
    description: str = ""


@dataclass(frozen=True)
class QuestionBank:
    """Read-only question content plus a canonical id index.

    The index covers domain and suite questions alike and is built once at
    construction.
    """
    version: int
    domains: tuple = ()
    suites: tuple = ()
    index: dict = field(default_factory=dict, init=False, compare=False, repr=False)

    def __post_init__(self):
        index = {}
        for domain in self.domains:
            for question in domain.questions():
                index.setdefault(question.id, question)
        for suite in self.suites:
            for question in suite.questions:
                index.setdefault(question.id, question)
        object.__setattr__(self, "index", index)

    def get(self, question_id: str) -> Optional[Question]:
        return self.index.get(question_id)

    def domain_questions(self) -> list:
        return [q for d in self.domains for q in d.questions()]

    def all_questions(self) -> list:
        return list(self.index.values())


@dataclass(frozen=True)
class Answer:
    question_id: str
    value: FactValue
    timestamp: datetime
    points_earned: float = 0
    expires_at: Optional[datetime] = None
    expiration_reason: Optional[str] = None
    question_text: str = ""

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at


@dataclass(frozen=True)
class SecurityLevel:
    id: str
    title: str
    min_score: int
    description: str = ""


@dataclass(frozen=True)
class SecurityGap:
    question_id: str
    category: str
    severity: str  # "critical" or "medium"
    description: str
    recommendation: str
    answered: bool = True


@dataclass(frozen=True)
class ScoreResult:
    overall_score: int
    domain_scores: dict
    level: SecurityLevel
    quick_wins_completed: int
    total_quick_wins: int
    total_security_score: float = 0.0
    max_possible_score: float = 0.0
    question_points: dict = field(default_factory=dict)
    critical_vulnerabilities: int = 0
    security_gaps: tuple = ()
    achievements: tuple = ()
    answered_count: int = 0
