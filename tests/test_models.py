"""Tests for data model classes."""
from datetime import datetime, timedelta

from cyber_fitness.models import (
    Answer, AnswerOption, Fact, QuestionBank, ScaleQuestion, Suite, YesNoQuestion,
    Domain, Level,
)


def test_fact_kind():
    now = datetime(2026, 1, 1)
    assert Fact("os", "mac", "device", now).kind == "string"
    assert Fact("has_vpn", True, "answer", now).kind == "boolean"
    assert Fact("devices", 3, "answer", now).kind == "number"
    assert Fact("ratio", 0.5, "answer", now).kind == "number"


def test_question_type_tags():
    assert YesNoQuestion(id="a", text="A?").type == "YN"
    q = ScaleQuestion(id="b", text="B?")
    assert q.type == "SCALE"
    assert q.min_value == 1
    assert q.max_value == 5


def test_question_defaults():
    q = YesNoQuestion(id="a", text="A?")
    assert q.weight == 5
    assert q.category is None
    assert q.conditions is None
    assert q.options == ()
    assert q.quick_win is False


def test_option_lookup_accepts_booleans():
    q = YesNoQuestion(id="a", text="A?", options=(AnswerOption("yes"), AnswerOption("no")))
    assert q.option(True).id == "yes"
    assert q.option(False).id == "no"
    assert q.option("maybe") is None


def test_bank_index_includes_suite_questions():
    domain_q = YesNoQuestion(id="lock_screen", text="Lock?")
    suite_q = YesNoQuestion(id="advanced_2fa", text="Keys?", suite_id="adv")
    bank = QuestionBank(
        version=1,
        domains=(Domain("devices", "Devices", (Level(1, (domain_q,)),)),),
        suites=(Suite("adv", "Advanced", questions=(suite_q,)),),
    )
    assert bank.get("lock_screen") is domain_q
    assert bank.get("advanced_2fa") is suite_q
    assert bank.get("nope") is None
    assert [q.id for q in bank.domain_questions()] == ["lock_screen"]


def test_answer_is_expired():
    now = datetime(2026, 3, 1, 12, 0)
    fresh = Answer("a", "yes", now, expires_at=now + timedelta(days=1))
    stale = Answer("a", "yes", now, expires_at=now - timedelta(seconds=1))
    forever = Answer("a", "yes", now)
    assert fresh.is_expired(now) is False
    assert stale.is_expired(now) is True
    assert forever.is_expired(now + timedelta(days=3650)) is False
