"""
Constant rules and boolean combinators.
"""
from .base import CompositeRule, Rule


class BooleanRule(Rule):
    """Always returns the same value. BooleanRule.TRUE and BooleanRule.FALSE are shared instances."""

    TYPE_NAME = "BooleanRule"

    TRUE: "BooleanRule"
    FALSE: "BooleanRule"

    def __init__(self, value: bool):
        super().__init__()
        self.value = bool(value)

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        return self.trace(index, self.value)


BooleanRule.TRUE = BooleanRule(True)
BooleanRule.FALSE = BooleanRule(False)


class FixedRule(Rule):
    """Satisfied exactly at the given indices."""

    TYPE_NAME = "FixedRule"

    def __init__(self, *indexes: int):
        super().__init__()
        self.indexes = tuple(indexes)
        self._index_set = frozenset(indexes)

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        return self.trace(index, index in self._index_set)


class AndRule(CompositeRule):
    """rule1 and rule2 (rule2 is not evaluated when rule1 is False)."""

    TYPE_NAME = "AndRule"

    def __init__(self, rule1: Rule, rule2: Rule):
        super().__init__(rule1, rule2)

    @property
    def rule1(self) -> Rule:
        return self.components[0]

    @property
    def rule2(self) -> Rule:
        return self.components[1]

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        satisfied = (
            self.rule1.is_satisfied(index, trading_record)
            and self.rule2.is_satisfied(index, trading_record)
        )
        return self.trace(index, satisfied)


class OrRule(CompositeRule):
    """rule1 or rule2 (rule2 is not evaluated when rule1 is True)."""

    TYPE_NAME = "OrRule"

    def __init__(self, rule1: Rule, rule2: Rule):
        super().__init__(rule1, rule2)

    @property
    def rule1(self) -> Rule:
        return self.components[0]

    @property
    def rule2(self) -> Rule:
        return self.components[1]

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        satisfied = (
            self.rule1.is_satisfied(index, trading_record)
            or self.rule2.is_satisfied(index, trading_record)
        )
        return self.trace(index, satisfied)


class XorRule(CompositeRule):
    """Exactly one of rule1, rule2."""

    TYPE_NAME = "XorRule"

    def __init__(self, rule1: Rule, rule2: Rule):
        super().__init__(rule1, rule2)

    @property
    def rule1(self) -> Rule:
        return self.components[0]

    @property
    def rule2(self) -> Rule:
        return self.components[1]

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        satisfied = (
            self.rule1.is_satisfied(index, trading_record)
            != self.rule2.is_satisfied(index, trading_record)
        )
        return self.trace(index, satisfied)


class NotRule(CompositeRule):
    """Negation of a rule."""

    TYPE_NAME = "NotRule"

    def __init__(self, rule: Rule):
        super().__init__(rule)

    @property
    def rule(self) -> Rule:
        return self.components[0]

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        return self.trace(index, not self.rule.is_satisfied(index, trading_record))
