# tests/test_expiration.py
from datetime import datetime, timedelta

from cyber_fitness.expiration import (
    compute_expiration, expired_answers, expiring_answers, format_expiration, is_expired,
)
from cyber_fitness.models import Answer

NOW = datetime(2026, 4, 10, 8, 30)


def test_listed_value():
    exp = compute_expiration("two_factor_auth", "yes", NOW)
    assert exp.expires_at == NOW + timedelta(days=180)
    assert exp.reason == "Review 2FA setup"


def test_default_entry_for_unlisted_value():
    exp = compute_expiration("two_factor_auth", "partial", NOW)
    assert exp.expires_at == NOW + timedelta(days=7)


def test_never_expires():
    assert compute_expiration("software_updates", "automatic", NOW).expires_at is None
    assert compute_expiration("lock_screen", "yes", NOW).expires_at is None


def test_boolean_values_map_to_yes_no():
    assert compute_expiration("two_factor_auth", True, NOW).expires_at == NOW + timedelta(days=180)


def test_is_expired_boundary():
    answer = Answer("a", "yes", NOW, expires_at=NOW)
    assert not is_expired(answer, NOW)
    assert is_expired(answer, NOW + timedelta(seconds=1))


def test_expiring_and_expired_lists():
    answers = {
        "soon": Answer("soon", "x", NOW, expires_at=NOW + timedelta(days=2), expiration_reason="Soon"),
        "sooner": Answer("sooner", "x", NOW, expires_at=NOW + timedelta(days=1)),
        "later": Answer("later", "x", NOW, expires_at=NOW + timedelta(days=30)),
        "gone": Answer("gone", "x", NOW, expires_at=NOW - timedelta(days=3)),
        "older": Answer("older", "x", NOW, expires_at=NOW - timedelta(days=10)),
        "forever": Answer("forever", "x", NOW),
    }
    upcoming = expiring_answers(answers, NOW, within_days=7)
    assert [r["question_id"] for r in upcoming] == ["older", "gone", "sooner", "soon"]
    assert upcoming[3]["reason"] == "Soon"
    assert upcoming[3]["days_until_expiry"] == 2

    overdue = expired_answers(answers, NOW)
    assert [r["question_id"] for r in overdue] == ["older", "gone"]
    assert overdue[0]["expired_days"] == 10


def test_format_expiration():
    assert format_expiration(NOW - timedelta(days=2), NOW) == "Expired 2 days ago"
    assert format_expiration(NOW, NOW) == "Expires today"
    assert format_expiration(NOW + timedelta(days=1), NOW) == "Expires tomorrow"
    assert format_expiration(NOW + timedelta(days=5), NOW) == "Expires in 5 days"
    assert format_expiration(NOW + timedelta(days=30), NOW) == "2026-05-10"
