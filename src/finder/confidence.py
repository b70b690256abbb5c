"""Line-level confidence heuristics for detected usages.

Confidence levels:

- CERTAIN: direct, unambiguous usage (``new Class()``, ``Class::method()``)
- PROBABLE: typed or contextual usage (``?->``, typed parameters, chaining)
- POSSIBLE: dynamic but traceable (``new $class``, ``$obj->$method()``)
- DYNAMIC: runtime indirection (``call_user_func``, ``__call``, ``$fn()``)

Rules live in ordered tables and the first rule that matches decides. Every
string, including the empty string, yields a tier.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from artifacts.models.usages import Confidence

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence


@dataclass(frozen=True)
class ScoringRule:
    """A named predicate over a code line that assigns ``tier`` when it holds."""

    name: str
    tier: Confidence
    predicate: Callable[[str], bool]

    def applies(self, code: str) -> bool:
        return self.predicate(code)


@dataclass(frozen=True)
class ContextRule:
    """A named predicate over ``(code, enclosing_text)``."""

    name: str
    tier: Confidence
    predicate: Callable[[str, str], bool]

    def applies(self, code: str, enclosing: str) -> bool:
        return self.predicate(code, enclosing)


def _pattern(regex: str) -> Callable[[str], bool]:
    compiled = re.compile(regex)
    return lambda code: compiled.search(code) is not None


def _contains(*needles: str) -> Callable[[str], bool]:
    return lambda code: any(needle in code for needle in needles)


_TYPED_PARAMETER = re.compile(
    r"function\s+\w*\s*\([^)]*[A-Z]\w*\s+(?:&\s*)?(?:\.\.\.)?\$\w+"
)
_TYPED_PROPERTY = re.compile(
    r"\b(?:private|protected|public|var)\s+(?:static\s+)?(?:readonly\s+)?"
    r"\??[A-Z][\w\\]*\s+\$\w+"
)
_CHAINED_ACCESSOR = re.compile(r"->\w+\(\)->\w+")

CERTAIN_RULES: tuple[ScoringRule, ...] = (
    ScoringRule(
        "new-named-class",
        Confidence.CERTAIN,
        _pattern(r"\bnew\s+\\?[A-Z][\w\\]*\s*\("),
    ),
    ScoringRule(
        "static-method-call",
        Confidence.CERTAIN,
        _pattern(r"\b[A-Z]\w*::[a-zA-Z_]\w*\s*\("),
    ),
    ScoringRule(
        "class-constant",
        Confidence.CERTAIN,
        _pattern(r"\b[A-Z]\w*::[A-Z_][A-Z0-9_]*\b"),
    ),
    ScoringRule(
        "typed-parameter",
        Confidence.CERTAIN,
        lambda code: _TYPED_PARAMETER.search(code) is not None,
    ),
    ScoringRule(
        "typed-property",
        Confidence.CERTAIN,
        lambda code: _TYPED_PROPERTY.search(code) is not None,
    ),
    ScoringRule("instanceof", Confidence.CERTAIN, _pattern(r"\binstanceof\b")),
    ScoringRule("class-literal", Confidence.CERTAIN, _contains("::class")),
    ScoringRule(
        "self-reference",
        Confidence.CERTAIN,
        _contains("self::", "parent::", "static::"),
    ),
)

DYNAMIC_RULES: tuple[ScoringRule, ...] = (
    ScoringRule("call-user-func", Confidence.DYNAMIC, _contains("call_user_func")),
    ScoringRule("magic-call", Confidence.DYNAMIC, _contains("__call")),
    ScoringRule("invoke", Confidence.DYNAMIC, _contains("->invoke")),
    ScoringRule("variable-variable", Confidence.DYNAMIC, _pattern(r"\$\{[^}]+\}")),
    # $fn() but not `new $class(` or `->$method(`
    ScoringRule(
        "variable-callable",
        Confidence.DYNAMIC,
        _pattern(r"(?<!new\s)(?<!->)\$[a-zA-Z_]\w*\s*\("),
    ),
)

POSSIBLE_RULES: tuple[ScoringRule, ...] = (
    ScoringRule("new-variable-class", Confidence.POSSIBLE, _pattern(r"\bnew\s+\$\w+")),
    ScoringRule(
        "variable-method-name",
        Confidence.POSSIBLE,
        _pattern(r"\$\w+\??->\$\w+\s*\("),
    ),
    ScoringRule(
        "string-assignment",
        Confidence.POSSIBLE,
        _pattern(r"\$\w+\s*=\s*[\"'][^\"']+[\"']"),
    ),
    ScoringRule(
        "string-type-check",
        Confidence.POSSIBLE,
        _pattern(
            r"\b(?:class_exists|interface_exists|method_exists|is_a|is_subclass_of)"
            r"\s*\("
        ),
    ),
    ScoringRule(
        "callable-array",
        Confidence.POSSIBLE,
        _pattern(r"\[\s*\$\w+\s*,\s*[\"'][^\"']+[\"']\s*\]"),
    ),
)

CONTEXT_RULES: tuple[ContextRule, ...] = (
    ContextRule(
        "typed-parameter-context",
        Confidence.PROBABLE,
        lambda code, enclosing: _TYPED_PARAMETER.search(enclosing) is not None,
    ),
    ContextRule(
        "var-annotation",
        Confidence.PROBABLE,
        lambda code, enclosing: "@var" in enclosing,
    ),
    ContextRule(
        "typed-property-context",
        Confidence.PROBABLE,
        lambda code, enclosing: _TYPED_PROPERTY.search(enclosing) is not None,
    ),
    ContextRule("nullsafe", Confidence.PROBABLE, lambda code, enclosing: "?->" in code),
    ContextRule(
        "chained-accessor",
        Confidence.PROBABLE,
        lambda code, enclosing: _CHAINED_ACCESSOR.search(code) is not None,
    ),
)

DEFAULT_TIER = Confidence.POSSIBLE
DEFAULT_RULE_NAME = "default"

_LINE_RULES: tuple[ScoringRule, ...] = (*CERTAIN_RULES, *DYNAMIC_RULES, *POSSIBLE_RULES)


def _first_match(rules: Sequence[ScoringRule], code: str) -> ScoringRule | None:
    for rule in rules:
        if rule.applies(code):
            return rule
    return None


class ConfidenceScorer:
    """Classifies a code line (optionally with its surroundings) into a tier."""

    def __init__(
        self,
        rules: Sequence[ScoringRule] = _LINE_RULES,
        context_rules: Sequence[ContextRule] = CONTEXT_RULES,
    ) -> None:
        self._rules = tuple(rules)
        self._context_rules = tuple(context_rules)

    def score(self, code: str) -> Confidence:
        rule = _first_match(self._rules, code.strip())
        return rule.tier if rule is not None else DEFAULT_TIER

    def score_with_context(self, code: str, enclosing: str) -> Confidence:
        """Let typed or chained surroundings lift a line to PROBABLE first."""
        code = code.strip()
        for rule in self._context_rules:
            if rule.applies(code, enclosing):
                return rule.tier
        return self.score(code)

    def explain(self, code: str) -> str:
        """Name of the rule that decides :meth:`score` for ``code``."""
        rule = _first_match(self._rules, code.strip())
        return rule.name if rule is not None else DEFAULT_RULE_NAME


__all__ = [
    "CERTAIN_RULES",
    "CONTEXT_RULES",
    "DYNAMIC_RULES",
    "POSSIBLE_RULES",
    "ConfidenceScorer",
    "ContextRule",
    "ScoringRule",
]
