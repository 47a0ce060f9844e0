"""Fact store: named, typed values with provenance."""
from datetime import datetime
from typing import Optional

from cyber_fitness.models import Fact, FactValue

WILDCARD = "*"


def values_match(actual, expected) -> bool:
    """Strict typed equality between a fact value and an expected value.

    Booleans only equal booleans, numbers only equal numbers and strings only
    equal strings. Anything else is a non-match rather than an error.
    """
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
    if isinstance(actual, (int, float)) and isinstance(expected, (int, float)):
        return actual == expected
    if isinstance(actual, str) and isinstance(expected, str):
        return actual == expected
    return False


def matches_expected(actual, expected) -> bool:
    """Match one fact value against a single value or a collection of values."""
    if isinstance(expected, (list, tuple, set, frozenset)):
        return any(values_match(actual, e) for e in expected)
    return values_match(actual, expected)


class FactStore:
    """Immutable mapping of fact name to Fact.

    Writes return a new store; later writes to the same name win.
    """

    def __init__(self, facts: Optional[dict] = None):
        self._facts = dict(facts or {})

    def __contains__(self, name: str) -> bool:
        return name in self._facts

    def __len__(self) -> int:
        return len(self._facts)

    def __eq__(self, other) -> bool:
        return isinstance(other, FactStore) and self._facts == other._facts

    def __repr__(self) -> str:
        return f"FactStore({self.as_dict()!r})"

    def get(self, name: str) -> Optional[FactValue]:
        fact = self._facts.get(name)
        return fact.value if fact is not None else None

    def get_fact(self, name: str) -> Optional[Fact]:
        return self._facts.get(name)

    def set(self, name: str, value: FactValue, source: str, timestamp: Optional[datetime] = None) -> "FactStore":
        facts = dict(self._facts)
        facts[name] = Fact(name=name, value=value, source=source, timestamp=timestamp or datetime.now())
        return FactStore(facts)

    def set_many(self, values: dict, source: str, timestamp: Optional[datetime] = None) -> "FactStore":
        ts = timestamp or datetime.now()
        facts = dict(self._facts)
        for name, value in values.items():
            facts[name] = Fact(name=name, value=value, source=source, timestamp=ts)
        return FactStore(facts)

    def has_value(self, name: str, expected) -> bool:
        fact = self._facts.get(name)
        if fact is None:
            return False
        if expected == WILDCARD:
            return True
        return matches_expected(fact.value, expected)

    def names(self) -> list[str]:
        return list(self._facts)

    def as_dict(self) -> dict:
        return {name: fact.value for name, fact in self._facts.items()}

    def to_records(self) -> dict:
        return {
            name: {
                "name": fact.name,
                "value": fact.value,
                "source": fact.source,
                "timestamp": fact.timestamp.isoformat(),
            }
            for name, fact in self._facts.items()
        }

    @classmethod
    def from_records(cls, records: dict) -> "FactStore":
        facts = {}
        for name, rec in (records or {}).items():
            facts[name] = Fact(
                name=rec.get("name", name),
                value=rec["value"],
                source=rec.get("source", "import"),
                timestamp=datetime.fromisoformat(rec["timestamp"]) if rec.get("timestamp") else datetime.now(),
            )
        return cls(facts)
