"""
Windowed and counting combinators.

- AndWithThresholdRule / OrWithThresholdRule: operands fired somewhere in
  the trailing window [index - k + 1, index]
- VoteRule: at least `required` of the operands fire at index
- ChainRule: an initial rule followed by links that must each fire within
  their threshold after the previous one
"""
from dataclasses import dataclass
from typing import List, Sequence, Set

from .base import CompositeRule, Rule


def _fired_in_window(rule: Rule, start: int, end: int, trading_record) -> bool:
    """True if rule fires at any index in [start, end], scanning from end back."""
    for i in range(end, start - 1, -1):
        if rule.is_satisfied(i, trading_record):
            return True
    return False


class _ThresholdRule(CompositeRule):
    """Two operands and a trailing window of threshold bars."""

    def __init__(self, rule1: Rule, rule2: Rule, threshold: int):
        if rule1 is None or rule2 is None:
            raise ValueError(f"{self.TYPE_NAME} requires two non-null rules")
        if threshold < 1:
            raise ValueError(f"Threshold must be >= 1, got {threshold}")
        super().__init__(rule1, rule2)
        self.threshold = threshold

    @property
    def rule1(self) -> Rule:
        return self.components[0]

    @property
    def rule2(self) -> Rule:
        return self.components[1]

    def _window_start(self, index: int) -> int:
        return index - self.threshold + 1


class AndWithThresholdRule(_ThresholdRule):
    """
    Both operands fired within the last `threshold` bars (inclusive).

    The two firings need not coincide; the rule is never satisfied before
    threshold bars exist (index + 1 < threshold).
    """

    TYPE_NAME = "AndWithThresholdRule"

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        if index + 1 < self.threshold:
            return self.trace(index, False)
        start = self._window_start(index)
        satisfied = (
            _fired_in_window(self.rule1, start, index, trading_record)
            and _fired_in_window(self.rule2, start, index, trading_record)
        )
        return self.trace(index, satisfied)


class OrWithThresholdRule(_ThresholdRule):
    """Either operand fired within the last `threshold` bars (inclusive)."""

    TYPE_NAME = "OrWithThresholdRule"

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        if index + 1 < self.threshold:
            return self.trace(index, False)
        start = self._window_start(index)
        satisfied = (
            _fired_in_window(self.rule1, start, index, trading_record)
            or _fired_in_window(self.rule2, start, index, trading_record)
        )
        return self.trace(index, satisfied)


class VoteRule(CompositeRule):
    """Satisfied when at least `required` of the rules fire at index."""

    TYPE_NAME = "VoteRule"

    def __init__(self, required: int, *rules: Rule):
        if len(rules) == 1 and isinstance(rules[0], (list, tuple)):
            rules = tuple(rules[0])
        if not rules:
            raise ValueError("VoteRule requires at least one rule")
        if any(rule is None for rule in rules):
            raise ValueError("VoteRule rules must not contain None")
        if not 1 <= required <= len(rules):
            raise ValueError(
                f"Required votes must be in range 1-{len(rules)}, got {required}"
            )
        super().__init__(*rules)
        self.required = required

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        votes = 0
        for rule in self.components:
            if rule.is_satisfied(index, trading_record):
                votes += 1
                if votes >= self.required:
                    return self.trace(index, True)
        return self.trace(index, False)


@dataclass(frozen=True)
class ChainLink:
    """A rule that must fire within `threshold` bars after the previous chain element."""
    rule: Rule
    threshold: int

    def __post_init__(self):
        if self.rule is None:
            raise ValueError("ChainLink rule must not be None")
        if self.threshold < 0:
            raise ValueError(f"ChainLink threshold must be >= 0, got {self.threshold}")


class ChainRule(CompositeRule):
    """
    Ordered dependency chain.

    Satisfied at index when the last link fires at index and, walking
    backwards, every earlier element (down to the initial rule) fired at
    most the next link's threshold bars before that link. Firings at the
    same index count as in order. Without links this is the initial rule.
    """

    TYPE_NAME = "ChainRule"

    def __init__(self, initial_rule: Rule, *links: ChainLink):
        if initial_rule is None:
            raise ValueError("ChainRule initial rule must not be None")
        if len(links) == 1 and isinstance(links[0], (list, tuple)):
            links = tuple(links[0])
        for link in links:
            if not isinstance(link, ChainLink):
                raise ValueError(f"ChainRule links must be ChainLink, got {type(link).__name__}")
        super().__init__(initial_rule, *(link.rule for link in links))
        self.initial_rule = initial_rule
        self.links = tuple(links)

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        if not self.links:
            return self.trace(index, self.initial_rule.is_satisfied(index, trading_record))

        last = self.links[-1]
        if not last.rule.is_satisfied(index, trading_record):
            return self.trace(index, False)

        # Indices at which chain element k may have fired, given the later links.
        candidates: Set[int] = {index}
        elements: List[Rule] = [self.initial_rule] + [link.rule for link in self.links[:-1]]
        for k in range(len(elements) - 1, -1, -1):
            threshold = self.links[k].threshold
            window: Set[int] = set()
            for fired_at in candidates:
                window.update(range(max(0, fired_at - threshold), fired_at + 1))
            candidates = {
                i for i in sorted(window, reverse=True)
                if elements[k].is_satisfied(i, trading_record)
            }
            if not candidates:
                return self.trace(index, False)
        return self.trace(index, True)

    @property
    def thresholds(self) -> Sequence[int]:
        return tuple(link.threshold for link in self.links)
