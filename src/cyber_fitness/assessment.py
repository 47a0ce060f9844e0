"""Assessment state, answer reducers and the orchestrating holder."""
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from cyber_fitness.expiration import compute_expiration, expiring_answers
from cyber_fitness.facts import FactStore
from cyber_fitness.models import Answer, QuestionBank
from cyber_fitness.priority import rank_questions, todays_task
from cyber_fitness.scoring import earned_badges, question_points, score
from cyber_fitness.visibility import Visibility, available_question_ids, resolve

logger = logging.getLogger(__name__)

ANSWER_SOURCE = "answer"
DEVICE_SOURCE = "device"


@dataclass(frozen=True)
class AssessmentState:
    facts: FactStore = field(default_factory=FactStore)
    answers: dict = field(default_factory=dict)


def initial_state() -> AssessmentState:
    return AssessmentState()


def emitted_facts(question, value) -> dict:
    """Facts an answer establishes: the chosen option's facts plus ``emits``."""
    if question is None:
        return {}
    facts = {}
    if question.emits:
        facts[question.emits] = value
    option = question.option(value)
    if option is not None:
        facts.update(option.facts)
    return facts


def apply_answer(state: AssessmentState, bank: QuestionBank, question_id: str, value,
                 now: Optional[datetime] = None) -> AssessmentState:
    """Return a new state with the answer recorded and its facts written.

    Unknown question ids are recorded with zero points and emit no facts.
    """
    now = now or datetime.now()
    question = bank.get(question_id)
    expiration = compute_expiration(question_id, value, now)
    answer = Answer(
        question_id=question_id,
        value=value,
        timestamp=now,
        points_earned=question_points(question, value),
        expires_at=expiration.expires_at,
        expiration_reason=expiration.reason,
        question_text=question.text if question is not None else "",
    )
    answers = dict(state.answers)
    answers[question_id] = answer
    facts = state.facts
    new_facts = emitted_facts(question, value)
    if new_facts:
        facts = facts.set_many(new_facts, source=f"{ANSWER_SOURCE}:{question_id}", timestamp=now)
    return replace(state, facts=facts, answers=answers)


def apply_facts(state: AssessmentState, values: dict, source: str = DEVICE_SOURCE,
                now: Optional[datetime] = None) -> AssessmentState:
    return replace(state, facts=state.facts.set_many(values, source=source, timestamp=now))


def answer_to_record(answer: Answer, now: Optional[datetime] = None) -> dict:
    record = {
        "question_id": answer.question_id,
        "value": answer.value,
        "timestamp": answer.timestamp.isoformat(),
        "points_earned": answer.points_earned,
        "expires_at": answer.expires_at.isoformat() if answer.expires_at else None,
        "expiration_reason": answer.expiration_reason,
        "question_text": answer.question_text,
    }
    if now is not None:
        record["is_expired"] = answer.is_expired(now)
    return record


def answer_from_record(record: dict) -> Answer:
    # is_expired in the record is display-only and ignored here
    expires_at = record.get("expires_at")
    return Answer(
        question_id=record["question_id"],
        value=record["value"],
        timestamp=datetime.fromisoformat(record["timestamp"]),
        points_earned=record.get("points_earned", 0),
        expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
        expiration_reason=record.get("expiration_reason"),
        question_text=record.get("question_text", ""),
    )


class Assessment:
    """Single mutable holder of assessment state.

    Every mutation commits a new AssessmentState and recomputes visibility
    and score in full.
    """

    def __init__(self, bank: QuestionBank, state: Optional[AssessmentState] = None):
        self.bank = bank
        self._commit(state or initial_state())

    @property
    def state(self) -> AssessmentState:
        return self._state

    @property
    def facts(self) -> FactStore:
        return self._state.facts

    @property
    def answers(self) -> dict:
        return dict(self._state.answers)

    def _commit(self, state: AssessmentState) -> None:
        self._state = state
        self._visibility = resolve(self.bank, state.facts)
        self._score = score(self.bank, state.answers, state.facts)

    # -- mutations --

    def answer_question(self, question_id: str, value, now: Optional[datetime] = None) -> Answer:
        if self.bank.get(question_id) is None:
            logger.warning("Answer recorded for unknown question %r", question_id)
        before = self._score.overall_score
        self._commit(apply_answer(self._state, self.bank, question_id, value, now))
        logger.debug("Answered %s=%r, score %s -> %s",
                     question_id, value, before, self._score.overall_score)
        return self._state.answers[question_id]

    def set_device_facts(self, values: dict, source: str = DEVICE_SOURCE,
                         now: Optional[datetime] = None) -> None:
        self._commit(apply_facts(self._state, values, source, now))

    def reset_assessment(self) -> None:
        self._commit(initial_state())

    def replay(self, answer_log: list, device_facts: Optional[dict] = None,
               now: Optional[datetime] = None) -> None:
        """Rebuild state from a clean start by re-applying ``(question_id, value, timestamp)`` entries.

        Device facts are stamped with ``now``, defaulting to the first entry's
        timestamp so the same log always rebuilds the same state.
        """
        state = initial_state()
        if device_facts:
            if now is None and answer_log:
                now = answer_log[0][2]
            state = apply_facts(state, device_facts, now=now)
        for question_id, value, timestamp in answer_log:
            state = apply_answer(state, self.bank, question_id, value, timestamp)
        self._commit(state)

    # -- queries --

    @property
    def visibility(self) -> Visibility:
        return self._visibility

    def get_visible_question_ids(self) -> set[str]:
        return set(self._visibility.visible_question_ids)

    def get_unlocked_suite_ids(self) -> set[str]:
        return set(self._visibility.unlocked_suite_ids)

    def get_available_questions(self, now: Optional[datetime] = None) -> list:
        now = now or datetime.now()
        ids = available_question_ids(self.bank, self._visibility, self._state.answers, now)
        return [self.bank.get(qid) for qid in ids]

    def get_ordered_available_questions(self, now: Optional[datetime] = None) -> list:
        return rank_questions(self.get_available_questions(now), self._state.facts)

    def get_todays_task(self, now: Optional[datetime] = None):
        return todays_task(self.get_ordered_available_questions(now))

    def get_score(self):
        return self._score

    def get_earned_badges(self) -> list[str]:
        return earned_badges(self._score)

    def get_expiring_answers(self, now: Optional[datetime] = None, within_days: int = 7) -> list[dict]:
        return expiring_answers(self._state.answers, now or datetime.now(), within_days)

    # -- persistence boundary --

    def to_snapshot(self, now: Optional[datetime] = None) -> dict:
        return {
            "answers": {qid: answer_to_record(a, now) for qid, a in self._state.answers.items()},
            "facts": self._state.facts.to_records(),
        }

    def load_snapshot(self, snapshot: dict) -> None:
        self._commit(state_from_snapshot(snapshot))

    @classmethod
    def from_snapshot(cls, bank: QuestionBank, snapshot: dict) -> "Assessment":
        return cls(bank, state_from_snapshot(snapshot))


def state_from_snapshot(snapshot: dict) -> AssessmentState:
    answers = {
        qid: answer_from_record(rec)
        for qid, rec in (snapshot.get("answers") or {}).items()
    }
    return AssessmentState(facts=FactStore.from_records(snapshot.get("facts")), answers=answers)
