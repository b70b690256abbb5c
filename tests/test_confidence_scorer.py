from __future__ import annotations

import pytest

from artifacts.models.usages import Confidence
from finder.confidence import (
    CERTAIN_RULES,
    CONTEXT_RULES,
    DYNAMIC_RULES,
    POSSIBLE_RULES,
    ConfidenceScorer,
)


@pytest.fixture
def scorer() -> ConfidenceScorer:
    return ConfidenceScorer()


@pytest.mark.parametrize(
    ("code", "rule"),
    [
        ("$user = new User();", "new-named-class"),
        ("$user = new \\App\\Models\\User($id);", "new-named-class"),
        ("$sum = Math::add(1, 2);", "static-method-call"),
        ("$state = Status::ACTIVE;", "class-constant"),
        ("public function handle(Request $request) {", "typed-parameter"),
        ("private ?Logger $logger = null;", "typed-property"),
        ("if ($x instanceof Countable) {", "instanceof"),
        ("$map[Foo::class] = true;", "class-literal"),
        ("return self::$instance;", "self-reference"),
        ("parent::__construct();", "self-reference"),
        ("return static::$cache;", "self-reference"),
    ],
)
def test_certain_rules(scorer: ConfidenceScorer, code: str, rule: str) -> None:
    assert scorer.explain(code) == rule
    assert scorer.score(code) is Confidence.CERTAIN


@pytest.mark.parametrize(
    ("code", "rule"),
    [
        ("call_user_func([$obj, 'run']);", "call-user-func"),
        ("call_user_func_array($cb, $args);", "call-user-func"),
        ("public function __call($name, $args)", "magic-call"),
        ("$closure->invoke($payload);", "invoke"),
        ("${$name}->run();", "variable-variable"),
        ("$handler($event);", "variable-callable"),
    ],
)
def test_dynamic_rules(scorer: ConfidenceScorer, code: str, rule: str) -> None:
    assert scorer.explain(code) == rule
    assert scorer.score(code) is Confidence.DYNAMIC


@pytest.mark.parametrize(
    ("code", "rule"),
    [
        ("$obj = new $className($arg);", "new-variable-class"),
        ("$calc->$method();", "variable-method-name"),
        ("$class = 'App\\\\Models\\\\User';", "string-assignment"),
        ("if (class_exists($name)) {", "string-type-check"),
        ("if (method_exists($obj, 'run')) {", "string-type-check"),
        ("$cb = [$service, 'handle'];", "callable-array"),
    ],
)
def test_possible_rules(scorer: ConfidenceScorer, code: str, rule: str) -> None:
    assert scorer.explain(code) == rule
    assert scorer.score(code) is Confidence.POSSIBLE


@pytest.mark.parametrize(
    "code",
    ["", "   ", "// just a comment", "$user->getName();", "echo 'hi';"],
)
def test_unrecognized_lines_default_to_possible(
    scorer: ConfidenceScorer, code: str
) -> None:
    assert scorer.explain(code) == "default"
    assert scorer.score(code) is Confidence.POSSIBLE


def test_certain_rules_win_over_dynamic(scorer: ConfidenceScorer) -> None:
    assert scorer.score("call_user_func([Foo::class, 'make']);") is Confidence.CERTAIN


def test_variable_method_call_is_never_certain(scorer: ConfidenceScorer) -> None:
    assert scorer.score("$calc->$method();") in {
        Confidence.POSSIBLE,
        Confidence.DYNAMIC,
    }
    assert scorer.score_with_context("$calc->$method();", "") in {
        Confidence.POSSIBLE,
        Confidence.DYNAMIC,
    }


@pytest.mark.parametrize(
    ("code", "enclosing"),
    [
        ("$obj?->publicMethod();", ""),
        ("$user->getProfile()->getName();", ""),
        ("$svc->run();", "public function boot(Service $svc) {\n    $svc->run();"),
        ("$svc->run();", "/** @var Service $svc */\n$svc->run();"),
        ("$this->svc->run();", "private Service $svc;\n$this->svc->run();"),
    ],
)
def test_context_rules_lift_to_probable(
    scorer: ConfidenceScorer, code: str, enclosing: str
) -> None:
    assert scorer.score_with_context(code, enclosing) is Confidence.PROBABLE


def test_context_falls_back_to_line_rules(scorer: ConfidenceScorer) -> None:
    assert scorer.score_with_context("$fn();", "") is Confidence.DYNAMIC
    assert scorer.score_with_context("new User();", "") is Confidence.CERTAIN


def test_nullsafe_without_context_scores_possible(scorer: ConfidenceScorer) -> None:
    assert scorer.score("$obj?->publicMethod();") is Confidence.POSSIBLE


def test_every_result_is_a_known_tier(scorer: ConfidenceScorer) -> None:
    samples = ["", "\n", "new", "::", "->", "$", "${", "?->", "\x00\x01"]
    for code in samples:
        assert scorer.score(code) in set(Confidence)
        assert scorer.score_with_context(code, code) in set(Confidence)


def test_rule_names_are_unique() -> None:
    names = [
        rule.name
        for rule in (*CERTAIN_RULES, *DYNAMIC_RULES, *POSSIBLE_RULES, *CONTEXT_RULES)
    ]

    assert len(names) == len(set(names))


def test_rule_tables_carry_their_tier() -> None:
    assert {rule.tier for rule in CERTAIN_RULES} == {Confidence.CERTAIN}
    assert {rule.tier for rule in DYNAMIC_RULES} == {Confidence.DYNAMIC}
    assert {rule.tier for rule in POSSIBLE_RULES} == {Confidence.POSSIBLE}
    assert {rule.tier for rule in CONTEXT_RULES} == {Confidence.PROBABLE}


def test_custom_rule_table() -> None:
    scorer = ConfidenceScorer(rules=DYNAMIC_RULES)

    assert scorer.score("new User();") is Confidence.POSSIBLE
    assert scorer.score("$fn();") is Confidence.DYNAMIC
