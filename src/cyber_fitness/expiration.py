"""Answer expiration: which answers go stale and when."""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

# question id -> {answer value: (days until stale or None for never, reason)}
# The "*" entry applies to values not listed for that question.
EXPIRATION_RULES = {
    "virus_scan_recent": {
        "daily": (7, "Daily scan due"),
        "this_week": (7, "Weekly scan due"),
        "weekly": (7, "Weekly scan due"),
        "this_month": (30, "Monthly scan due"),
        "monthly": (30, "Monthly scan due"),
        "quarterly": (90, "Quarterly scan due"),
        "never": (7, "Scan overdue - immediate action needed"),
        "*": (None, None),
    },
    "software_updates": {
        "automatic": (None, None),
        "weekly": (7, "Check for updates"),
        "monthly": (30, "Check for updates"),
        "manual": (30, "Check for updates"),
        "rarely": (14, "Updates overdue - check now"),
        "*": (30, "Check for updates"),
    },
    "browser_updates": {
        "automatic": (None, None),
        "manual_prompt": (14, "Check browser updates"),
        "manual_check": (30, "Check browser updates"),
        "*": (30, "Check browser updates"),
    },
    "password_strength": {
        "weak": (7, "Upgrade weak passwords"),
        "mixed": (90, "Review password strength"),
        "strong": (180, "Password strength review"),
        "unique": (180, "Password strength review"),
        "*": (90, "Review passwords"),
    },
    "data_backup": {
        "automatic_cloud": (30, "Verify backup is working"),
        "automatic_local": (30, "Verify backup is working"),
        "manual_regular": (7, "Time for manual backup"),
        "manual_occasional": (30, "Backup recommended"),
        "none": (3, "Critical: Set up backup immediately"),
        "*": (14, "Check backup status"),
    },
    "two_factor_auth": {
        "yes": (180, "Review 2FA setup"),
        "*": (7, "Set up 2FA for better security"),
    },
    "wifi_security": {
        "wpa3": (180, "Review WiFi security"),
        "wpa2": (180, "Review WiFi security"),
        "wep": (7, "Upgrade insecure WiFi encryption"),
        "none": (1, "Critical: Secure your WiFi immediately"),
        "*": (90, "Check WiFi security"),
    },
    "phishing_awareness": {
        "high": (180, "Refresh security awareness"),
        "medium": (90, "Security awareness review"),
        "low": (30, "Security training recommended"),
        "*": (90, "Review security awareness"),
    },
}


@dataclass(frozen=True)
class Expiration:
    expires_at: Optional[datetime] = None
    reason: Optional[str] = None


def _value_key(value) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def compute_expiration(question_id: str, value, now: Optional[datetime] = None) -> Expiration:
    """Look up whether an answer value goes stale, and when.

    Questions without a rule never expire.
    """
    rules = EXPIRATION_RULES.get(question_id)
    if rules is None:
        return Expiration()
    days, reason = rules.get(_value_key(value), rules.get("*", (None, None)))
    if days is None:
        return Expiration()
    now = now or datetime.now()
    return Expiration(expires_at=now + timedelta(days=days), reason=reason)


def is_expired(answer, now: datetime) -> bool:
    return answer.expires_at is not None and now > answer.expires_at


def _days(delta: timedelta) -> int:
    return math.ceil(delta.total_seconds() / 86400)


def expiring_answers(answers: dict, now: datetime, within_days: int = 7) -> list[dict]:
    """Answers that expire on or before now + within_days, soonest first."""
    threshold = now + timedelta(days=within_days)
    rows = [
        {
            "question_id": qid,
            "expires_at": a.expires_at,
            "reason": a.expiration_reason,
            "days_until_expiry": _days(a.expires_at - now),
        }
        for qid, a in answers.items()
        if a.expires_at is not None and a.expires_at <= threshold
    ]
    return sorted(rows, key=lambda r: r["expires_at"])


def expired_answers(answers: dict, now: datetime) -> list[dict]:
    """Expired answers, most overdue first."""
    rows = [
        {
            "question_id": qid,
            "expired_days": _days(now - a.expires_at),
            "reason": a.expiration_reason,
        }
        for qid, a in answers.items()
        if is_expired(a, now)
    ]
    return sorted(rows, key=lambda r: r["expired_days"], reverse=True)


def format_expiration(expires_at: datetime, now: datetime) -> str:
    diff = _days(expires_at - now)
    if diff < 0:
        return f"Expired {abs(diff)} days ago"
    elif diff == 0:
        return "Expires today"
    elif diff == 1:
        return "Expires tomorrow"
    elif diff <= 7:
        return f"Expires in {diff} days"
    return expires_at.date().isoformat()
