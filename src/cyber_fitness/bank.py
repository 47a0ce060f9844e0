"""Load and validate question bank documents."""
import json
import logging
from pathlib import Path

import yaml

from cyber_fitness.models import (
    QUESTION_TYPES, ActionQuestion, AnswerOption, Conditions, Domain, Level,
    QuestionBank, ScaleQuestion, Suite, YesNoQuestion,
)

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"
DEFAULT_BANK_PATH = str(CONTENT_DIR / "questions.yaml")

QUESTION_CLASSES = {
    "YN": YesNoQuestion,
    "SCALE": ScaleQuestion,
    "ACTION": ActionQuestion,
}


class BankError(ValueError):
    """Raised when a question bank document cannot be loaded."""


def read_document(file_path: str) -> dict:
    path = Path(file_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise BankError(f"Cannot read question bank {file_path}: {e}") from e
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise BankError(f"Cannot parse question bank {file_path}: {e}") from e
    if not isinstance(data, dict):
        raise BankError(f"Question bank {file_path} must be a mapping at the top level")
    return data


def parse_conditions(raw):
    """Conditions from a document value. Malformed input means no conditions."""
    if not isinstance(raw, dict):
        return None
    include = raw.get("include") if isinstance(raw.get("include"), dict) else {}
    exclude = raw.get("exclude") if isinstance(raw.get("exclude"), dict) else {}
    if not include and not exclude:
        return None
    return Conditions(include=dict(include), exclude=dict(exclude))


def parse_gates(raw) -> Conditions:
    """Suite gates in any authored form, normalised to conditions.

    Accepts an include/exclude mapping, a plain {fact: value} mapping, a list
    of fact names that must be set, or a list of {fact: value} mappings.
    """
    if isinstance(raw, dict):
        if "include" in raw or "exclude" in raw:
            return parse_conditions(raw) or Conditions()
        return Conditions(include=dict(raw))
    include = {}
    for gate in raw or []:
        if isinstance(gate, str):
            include[gate] = "*"
        elif isinstance(gate, dict):
            include.update(gate)
        else:
            raise BankError(f"Unsupported gate entry: {gate!r}")
    return Conditions(include=include)


def _require_mapping(raw, what: str) -> dict:
    if not isinstance(raw, dict):
        raise BankError(f"{what} must be a mapping, got {raw!r}")
    return raw


def parse_option(raw: dict) -> AnswerOption:
    _require_mapping(raw, "Answer option")
    return AnswerOption(
        id=str(raw["id"]),
        text=raw.get("text", ""),
        facts=dict(raw.get("facts") or {}),
        points=raw.get("points", 0) or 0,
        feedback=raw.get("feedback", ""),
        conditions=parse_conditions(raw.get("conditions")),
    )


def parse_question(raw: dict, domain_id=None, level=None, suite_id=None):
    _require_mapping(raw, "Question")
    qid = raw.get("id")
    if not qid:
        raise BankError(f"Question missing id: {raw!r}")
    qtype = raw.get("type")
    if qtype not in QUESTION_TYPES:
        raise BankError(f"Question {qid} has invalid type: {qtype}")
    try:
        options = tuple(parse_option(o) for o in raw.get("options") or [])
    except KeyError as e:
        raise BankError(f"Question {qid} has an option without {e}") from e
    kwargs = dict(
        id=qid,
        text=raw.get("text", ""),
        weight=raw.get("weight", 5),
        category=raw.get("category"),
        conditions=parse_conditions(raw.get("conditions")),
        options=options,
        quick_win=bool(raw.get("quick_win", False)),
        tags=tuple(raw.get("tags") or ()),
        emits=raw.get("emits"),
        description=raw.get("description", ""),
        action_hint=raw.get("action_hint", ""),
        domain_id=domain_id,
        level=level,
        suite_id=suite_id,
    )
    if qtype == "SCALE":
        kwargs["min_value"] = raw.get("min_value", 1)
        kwargs["max_value"] = raw.get("max_value", 5)
        if kwargs["min_value"] >= kwargs["max_value"]:
            raise BankError(f"Scale question {qid} has min_value >= max_value")
    if qtype == "ACTION" and not options:
        raise BankError(f"Action question {qid} has no options")
    return QUESTION_CLASSES[qtype](**kwargs)


def parse_bank(data: dict) -> QuestionBank:
    _require_mapping(data, "Question bank")
    seen = set()

    def check(question):
        if question.id in seen:
            raise BankError(f"Duplicate question id: {question.id}")
        seen.add(question.id)
        return question

    domains = []
    for d in data.get("domains") or []:
        _require_mapping(d, "Domain")
        if not d.get("id"):
            raise BankError("Domain missing id")
        levels = []
        for lvl in d.get("levels") or []:
            _require_mapping(lvl, "Level")
            number = lvl.get("level", 0)
            questions = tuple(
                check(parse_question(q, domain_id=d["id"], level=number))
                for q in lvl.get("questions") or []
            )
            levels.append(Level(level=number, questions=questions))
        domains.append(Domain(id=d["id"], title=d.get("title", d["id"]), levels=tuple(levels)))

    suites = []
    for s in data.get("suites") or []:
        _require_mapping(s, "Suite")
        if not s.get("id"):
            raise BankError("Suite missing id")
        questions = tuple(
            check(parse_question(q, suite_id=s["id"]))
            for q in s.get("questions") or []
        )
        suites.append(Suite(
            id=s["id"],
            title=s.get("title", s["id"]),
            gates=parse_gates(s.get("gates")),
            questions=questions,
            description=s.get("description", ""),
        ))

    bank = QuestionBank(version=data.get("version", 1), domains=tuple(domains), suites=tuple(suites))
    warn_unreachable_gates(bank)
    return bank


def emitted_fact_names(bank: QuestionBank) -> set[str]:
    names = set()
    for question in bank.all_questions():
        if question.emits:
            names.add(question.emits)
        for opt in question.options:
            names.update(opt.facts)
    return names


def warn_unreachable_gates(bank: QuestionBank, device_facts=("os", "browser", "device_type", "mobile_os")) -> list[str]:
    """Log suites gated on facts nothing in the bank (or the detector) emits."""
    known = emitted_fact_names(bank) | set(device_facts)
    missing = []
    for suite in bank.suites:
        for name in suite.gates.include:
            if name not in known:
                logger.warning("Suite %s is gated on fact %r which no answer emits", suite.id, name)
                missing.append(f"{suite.id}:{name}")
    return missing


def load_bank(file_path: str = DEFAULT_BANK_PATH) -> QuestionBank:
    bank = parse_bank(read_document(file_path))
    logger.info("Loaded question bank v%s: %d questions, %d suites",
                bank.version, len(bank.index), len(bank.suites))
    return bank
