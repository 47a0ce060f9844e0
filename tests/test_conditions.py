# tests/test_conditions.py
from cyber_fitness.conditions import evaluate, explain, visible_options
from cyber_fitness.facts import FactStore
from cyber_fitness.models import AnswerOption, Conditions, YesNoQuestion


def facts(**values):
    return FactStore().set_many(values, "test")


def test_no_conditions_is_visible():
    assert evaluate(None, FactStore())
    assert evaluate(Conditions(), FactStore())
    assert evaluate({}, FactStore())


def test_malformed_conditions_are_visible():
    assert evaluate("garbage", FactStore())
    assert evaluate({"include": "two_factor"}, FactStore())
    assert evaluate({"exclude": ["os"]}, facts(os="mac"))


def test_include_fails_closed_on_missing_fact():
    assert not evaluate({"include": {"two_factor": "yes"}}, FactStore())
    assert not evaluate({"include": {"two_factor": ["yes", "no"]}}, FactStore())


def test_include_single_value_and_membership():
    cond = {"include": {"two_factor": ["yes", "partial"]}}
    assert evaluate(cond, facts(two_factor="partial"))
    assert not evaluate(cond, facts(two_factor="no"))
    assert evaluate({"include": {"os": "mac"}}, facts(os="mac"))


def test_include_pairs_are_anded():
    cond = {"include": {"browser": "firefox", "ad_blocker": ["no", "partial"]}}
    assert evaluate(cond, facts(browser="firefox", ad_blocker="no"))
    assert not evaluate(cond, facts(browser="chrome", ad_blocker="no"))
    assert not evaluate(cond, facts(browser="firefox"))


def test_excludes_are_ored():
    cond = {"exclude": {"device_type": "desktop", "works_remotely": "no"}}
    assert evaluate(cond, FactStore())
    assert evaluate(cond, facts(device_type="laptop", works_remotely="yes"))
    assert not evaluate(cond, facts(device_type="desktop"))
    assert not evaluate(cond, facts(works_remotely="no"))
    assert not evaluate(cond, facts(device_type="desktop", works_remotely="no"))


def test_exclude_vetoes_include():
    cond = {"include": {"ad_blocker": "no"}, "exclude": {"browser": "safari"}}
    assert evaluate(cond, facts(ad_blocker="no", browser="chrome"))
    assert not evaluate(cond, facts(ad_blocker="no", browser="safari"))


def test_type_mismatch_is_non_matching():
    assert not evaluate({"include": {"has_vpn": "true"}}, facts(has_vpn=True))
    assert not evaluate({"include": {"devices": True}}, facts(devices=1))
    # mismatched exclude does not hide
    assert evaluate({"exclude": {"has_vpn": "true"}}, facts(has_vpn=True))


def test_wildcard():
    assert evaluate({"include": {"os": "*"}}, facts(os="linux"))
    assert not evaluate({"include": {"os": "*"}}, FactStore())
    assert not evaluate({"exclude": {"os": "*"}}, facts(os="linux"))
    assert evaluate({"exclude": {"os": "*"}}, FactStore())


def test_explain_reports_failing_clause():
    result = explain({"include": {"two_factor": "yes"}}, FactStore())
    assert result.visible is False
    assert "two_factor" in result.reason
    assert "not set" in result.reason
    result = explain({"exclude": {"os": "mac"}}, facts(os="mac"))
    assert result.visible is False
    assert result.reason.startswith("exclude os")
    assert explain(None, FactStore()).reason == ""


def test_visible_options_filters_by_option_conditions():
    q = YesNoQuestion(id="browser_choice", text="Which?", options=(
        AnswerOption("safari", conditions=Conditions(include={"os": ["mac", "ios"]})),
        AnswerOption("edge", conditions=Conditions(exclude={"os": "linux"})),
        AnswerOption("firefox"),
    ))
    assert [o.id for o in visible_options(q, facts(os="linux"))] == ["firefox"]
    assert [o.id for o in visible_options(q, facts(os="mac"))] == ["safari", "edge", "firefox"]
