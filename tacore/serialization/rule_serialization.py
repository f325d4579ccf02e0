"""
Descriptor codec for rules and strategies.

Each supported rule kind is registered with its canonical type name, a
describe function (rule -> parameters and child components) and a build
function (series, parameters, children -> rule). Rule children and
indicator children are both carried in `components`, in operand order.

describe(rule_from_descriptor(series, describe(rule))) is structurally equal
to describe(rule) for every supported kind.
"""
from datetime import time
import logging
from typing import Any, Callable, Dict, List, NamedTuple, Set, Type, Union

from .descriptor import ComponentDescriptor
from .errors import (
    MalformedDescriptorError,
    UnknownComponentTypeError,
    UnsupportedSerializationError,
)
from .indicator_serialization import (
    INDICATOR_TYPE_NAMES,
    describe_indicator,
    indicator_from_descriptor,
    whole_number,
)
from ..indicators import DateTimeIndicator, Indicator
from ..rules import (
    AndRule,
    AndWithThresholdRule,
    AverageTrueRangeStopGainRule,
    AverageTrueRangeStopLossRule,
    AverageTrueRangeTrailingStopGainRule,
    AverageTrueRangeTrailingStopLossRule,
    BaseStrategy,
    BooleanRule,
    ChainLink,
    ChainRule,
    CrossedDownIndicatorRule,
    CrossedUpIndicatorRule,
    DayOfWeekRule,
    FixedAmountStopGainRule,
    FixedAmountStopLossRule,
    FixedRule,
    HourOfDayRule,
    JustOnceRule,
    MinuteOfHourRule,
    NotRule,
    OrRule,
    OrWithThresholdRule,
    OverIndicatorRule,
    Rule,
    StopGainRule,
    StopLossRule,
    TimeRange,
    TimeRangeRule,
    TrailingFixedAmountStopGainRule,
    TrailingFixedAmountStopLossRule,
    TrailingStopGainRule,
    TrailingStopLossRule,
    UnderIndicatorRule,
    VolatilityStopGainRule,
    VolatilityStopLossRule,
    VolatilityTrailingStopGainRule,
    VolatilityTrailingStopLossRule,
    VoteRule,
    WaitForRule,
    XorRule,
)
from ..series import BarSeries
from ..shared.defaults import UNSTABLE_BARS
from ..trading import TradeType

logger = logging.getLogger(__name__)

STRATEGY_TYPE_NAME = "BaseStrategy"

Component = Union[Rule, Indicator]


class _Described(NamedTuple):
    parameters: Dict[str, Any]
    components: List[Component]


class _RuleCodec(NamedTuple):
    describe: Callable[[Rule], _Described]
    build: Callable[[BarSeries, "_Parameters", List[Component]], Rule]


class _Parameters:
    """Typed access to descriptor parameters; bad values raise MalformedDescriptorError."""

    def __init__(self, type_name: str, values: Dict[str, Any]):
        self.type_name = type_name
        self.values = values

    def require(self, key: str):
        if key not in self.values:
            raise MalformedDescriptorError(f"{self.type_name} descriptor is missing parameter '{key}'")
        return self.values[key]

    def invalid(self, key: str, expected: str):
        return MalformedDescriptorError(
            f"{self.type_name} parameter '{key}' must be {expected}, got {self.values.get(key)!r}"
        )

    def integer(self, key: str) -> int:
        value = self.require(key)
        try:
            return whole_number(value)
        except ValueError:
            raise self.invalid(key, "an integer")

    def integers(self, key: str) -> List[int]:
        value = self.require(key)
        if not isinstance(value, (list, tuple)):
            raise self.invalid(key, "a list of integers")
        try:
            return [whole_number(item) for item in value]
        except ValueError:
            raise self.invalid(key, "a list of integers")

    def number(self, key: str) -> str:
        """Numeric parameter as text; conversion to Num happens in the rule constructor."""
        value = self.require(key)
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise self.invalid(key, "a number")
        return str(value)

    def boolean(self, key: str) -> bool:
        value = self.require(key)
        if not isinstance(value, bool):
            raise self.invalid(key, "a boolean")
        return value

    def strings(self, key: str) -> List[str]:
        value = self.require(key)
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            raise self.invalid(key, "a list of strings")
        return list(value)

    def trade_type(self, key: str) -> TradeType:
        value = self.require(key)
        try:
            return TradeType[str(value).upper()]
        except KeyError:
            raise self.invalid(key, "BUY or SELL")


def _children(type_name: str, children: List[Component], count: int, kinds=None) -> List[Component]:
    if len(children) != count:
        raise MalformedDescriptorError(
            f"{type_name} descriptor needs {count} components, got {len(children)}"
        )
    if kinds is not None:
        for child, kind in zip(children, kinds):
            if not isinstance(child, kind):
                raise MalformedDescriptorError(
                    f"{type_name} component must be {kind.__name__}, got {type(child).__name__}"
                )
    return children


def _rules(type_name: str, children: List[Component]) -> List[Rule]:
    for child in children:
        if not isinstance(child, Rule):
            raise MalformedDescriptorError(
                f"{type_name} components must be rules, got {type(child).__name__}"
            )
    return children


def _format_time(value: time) -> str:
    return value.isoformat(timespec="seconds")


def _parse_time(type_name: str, value: Any) -> time:
    try:
        return time.fromisoformat(value)
    except (TypeError, ValueError):
        raise MalformedDescriptorError(f"{type_name} time must be HH:MM[:SS], got {value!r}")


def _build_time_ranges(series, params: _Parameters, children):
    (indicator,) = _children(params.type_name, children, 1, (DateTimeIndicator,))
    raw = params.require("timeRanges")
    if not isinstance(raw, (list, tuple)):
        raise params.invalid("timeRanges", "a list of {from, to} objects")
    ranges = []
    for item in raw:
        if not isinstance(item, dict) or "from" not in item or "to" not in item:
            raise params.invalid("timeRanges", "a list of {from, to} objects")
        ranges.append(TimeRange(
            _parse_time(params.type_name, item["from"]),
            _parse_time(params.type_name, item["to"]),
        ))
    return TimeRangeRule(ranges, indicator)


def _binary(cls):
    return _RuleCodec(
        lambda rule: _Described({}, [rule.rule1, rule.rule2]),
        lambda series, params, children: cls(*_children(params.type_name, children, 2, (Rule, Rule))),
    )


def _windowed(cls):
    return _RuleCodec(
        lambda rule: _Described({"threshold": rule.threshold}, [rule.rule1, rule.rule2]),
        lambda series, params, children: cls(
            *_children(params.type_name, children, 2, (Rule, Rule)), params.integer("threshold")
        ),
    )


def _percentage(cls):
    return _RuleCodec(
        lambda rule: _Described({"percentage": str(rule.percentage)}, [rule.price_indicator]),
        lambda series, params, children: cls(
            *_children(params.type_name, children, 1, (Indicator,)), params.number("percentage")
        ),
    )


def _fixed_amount(cls):
    return _RuleCodec(
        lambda rule: _Described({"amount": str(rule.amount)}, [rule.price_indicator]),
        lambda series, params, children: cls(
            *_children(params.type_name, children, 1, (Indicator,)), params.number("amount")
        ),
    )


def _average_true_range(cls):
    return _RuleCodec(
        lambda rule: _Described(
            {"barCount": rule.bar_count, "coefficient": str(rule.coefficient)},
            [rule.price_indicator],
        ),
        lambda series, params, children: cls(
            series,
            params.integer("barCount"),
            params.number("coefficient"),
            *_children(params.type_name, children, 1, (Indicator,)),
        ),
    )


def _volatility(cls):
    return _RuleCodec(
        lambda rule: _Described(
            {"barCount": rule.bar_count, "coefficient": str(rule.coefficient)},
            [rule.price_indicator],
        ),
        lambda series, params, children: cls(
            *_children(params.type_name, children, 1, (Indicator,)),
            params.integer("barCount"),
            params.number("coefficient"),
        ),
    )


def _comparison(cls):
    return _RuleCodec(
        lambda rule: _Described({}, [rule.first, rule.second]),
        lambda series, params, children: cls(
            *_children(params.type_name, children, 2, (Indicator, Indicator))
        ),
    )


def _build_chain(series, params: _Parameters, children):
    rules = _rules(params.type_name, children)
    thresholds = params.integers("thresholds")
    if not rules:
        raise MalformedDescriptorError("ChainRule descriptor needs an initial rule")
    if len(thresholds) != len(rules) - 1:
        raise MalformedDescriptorError(
            f"ChainRule has {len(rules) - 1} links but {len(thresholds)} thresholds"
        )
    links = [ChainLink(rule, threshold) for rule, threshold in zip(rules[1:], thresholds)]
    return ChainRule(rules[0], *links)


_CODECS: Dict[Type[Rule], _RuleCodec] = {
    BooleanRule: _RuleCodec(
        lambda rule: _Described({"value": rule.value}, []),
        lambda series, params, children: BooleanRule(params.boolean("value")),
    ),
    FixedRule: _RuleCodec(
        lambda rule: _Described({"indexes": list(rule.indexes)}, []),
        lambda series, params, children: FixedRule(*params.integers("indexes")),
    ),
    AndRule: _binary(AndRule),
    OrRule: _binary(OrRule),
    XorRule: _binary(XorRule),
    NotRule: _RuleCodec(
        lambda rule: _Described({}, [rule.rule]),
        lambda series, params, children: NotRule(*_children(params.type_name, children, 1, (Rule,))),
    ),
    AndWithThresholdRule: _windowed(AndWithThresholdRule),
    OrWithThresholdRule: _windowed(OrWithThresholdRule),
    VoteRule: _RuleCodec(
        lambda rule: _Described({"required": rule.required}, list(rule.components)),
        lambda series, params, children: VoteRule(
            params.integer("required"), *_rules(params.type_name, children)
        ),
    ),
    ChainRule: _RuleCodec(
        lambda rule: _Described({"thresholds": list(rule.thresholds)}, list(rule.components)),
        _build_chain,
    ),
    JustOnceRule: _RuleCodec(
        lambda rule: _Described({}, [rule.rule]),
        lambda series, params, children: JustOnceRule(*_children(params.type_name, children, 1, (Rule,))),
    ),
    WaitForRule: _RuleCodec(
        lambda rule: _Described({"tradeType": rule.trade_type.name, "barCount": rule.bar_count}, []),
        lambda series, params, children: WaitForRule(
            params.trade_type("tradeType"), params.integer("barCount")
        ),
    ),
    StopLossRule: _percentage(StopLossRule),
    StopGainRule: _percentage(StopGainRule),
    TrailingStopLossRule: _percentage(TrailingStopLossRule),
    TrailingStopGainRule: _percentage(TrailingStopGainRule),
    FixedAmountStopLossRule: _fixed_amount(FixedAmountStopLossRule),
    FixedAmountStopGainRule: _fixed_amount(FixedAmountStopGainRule),
    TrailingFixedAmountStopLossRule: _fixed_amount(TrailingFixedAmountStopLossRule),
    TrailingFixedAmountStopGainRule: _fixed_amount(TrailingFixedAmountStopGainRule),
    AverageTrueRangeStopLossRule: _average_true_range(AverageTrueRangeStopLossRule),
    AverageTrueRangeStopGainRule: _average_true_range(AverageTrueRangeStopGainRule),
    AverageTrueRangeTrailingStopLossRule: _average_true_range(AverageTrueRangeTrailingStopLossRule),
    AverageTrueRangeTrailingStopGainRule: _average_true_range(AverageTrueRangeTrailingStopGainRule),
    VolatilityStopLossRule: _volatility(VolatilityStopLossRule),
    VolatilityStopGainRule: _volatility(VolatilityStopGainRule),
    VolatilityTrailingStopLossRule: _volatility(VolatilityTrailingStopLossRule),
    VolatilityTrailingStopGainRule: _volatility(VolatilityTrailingStopGainRule),
    HourOfDayRule: _RuleCodec(
        lambda rule: _Described({"hours": list(rule.hours)}, [rule.date_time_indicator]),
        lambda series, params, children: HourOfDayRule(
            *_children(params.type_name, children, 1, (DateTimeIndicator,)), *params.integers("hours")
        ),
    ),
    MinuteOfHourRule: _RuleCodec(
        lambda rule: _Described({"minutes": list(rule.minutes)}, [rule.date_time_indicator]),
        lambda series, params, children: MinuteOfHourRule(
            *_children(params.type_name, children, 1, (DateTimeIndicator,)), *params.integers("minutes")
        ),
    ),
    DayOfWeekRule: _RuleCodec(
        lambda rule: _Described(
            {"daysOfWeek": [day.name for day in rule.days_of_week]}, [rule.date_time_indicator]
        ),
        lambda series, params, children: DayOfWeekRule(
            *_children(params.type_name, children, 1, (DateTimeIndicator,)), *params.strings("daysOfWeek")
        ),
    ),
    TimeRangeRule: _RuleCodec(
        lambda rule: _Described(
            {"timeRanges": [
                {"from": _format_time(r.start), "to": _format_time(r.end)} for r in rule.time_ranges
            ]},
            [rule.date_time_indicator],
        ),
        _build_time_ranges,
    ),
    OverIndicatorRule: _comparison(OverIndicatorRule),
    UnderIndicatorRule: _comparison(UnderIndicatorRule),
    CrossedUpIndicatorRule: _comparison(CrossedUpIndicatorRule),
    CrossedDownIndicatorRule: _comparison(CrossedDownIndicatorRule),
}

_CODECS_BY_NAME: Dict[str, _RuleCodec] = {cls.TYPE_NAME: codec for cls, codec in _CODECS.items()}


def _describe_component(component: Component) -> ComponentDescriptor:
    if isinstance(component, Rule):
        return describe_rule(component)
    return describe_indicator(component)


def describe_rule(rule: Rule) -> ComponentDescriptor:
    """
    Describe a rule graph.

    The rule's custom name, if any, becomes the descriptor label.

    Raises:
        UnsupportedSerializationError: If the rule, or any rule or indicator
            below it, has no codec
    """
    codec = _CODECS.get(type(rule))
    if codec is None:
        raise UnsupportedSerializationError(
            f"Rule type {type(rule).__name__} is not supported for serialization"
        )
    described = codec.describe(rule)
    return ComponentDescriptor(
        type=rule.TYPE_NAME,
        label=rule.name if rule.has_custom_name else None,
        parameters=described.parameters,
        components=tuple(_describe_component(c) for c in described.components),
    )


def num_factory_names(rule: Rule) -> Set[str]:
    """
    Names of the num factories behind the indicators a rule graph reads.

    Empty for rule graphs without indicators (FixedRule, BooleanRule, ...).

    Raises:
        UnsupportedSerializationError: If a rule in the graph has no codec
    """
    codec = _CODECS.get(type(rule))
    if codec is None:
        raise UnsupportedSerializationError(
            f"Rule type {type(rule).__name__} is not supported for serialization"
        )
    names: Set[str] = set()
    for component in codec.describe(rule).components:
        if isinstance(component, Rule):
            names |= num_factory_names(component)
        else:
            names.add(component.num_factory.name)
    return names


def is_serialization_supported(rule: Rule) -> bool:
    """True if describe_rule succeeds for the whole rule graph."""
    try:
        describe_rule(rule)
    except UnsupportedSerializationError as e:
        logger.debug(f"Serialization not supported: {e}")
        return False
    return True


def _component_from_descriptor(series: BarSeries, descriptor: ComponentDescriptor) -> Component:
    if descriptor is not None and descriptor.type in INDICATOR_TYPE_NAMES:
        return indicator_from_descriptor(series, descriptor)
    return rule_from_descriptor(series, descriptor)


def rule_from_descriptor(series: BarSeries, descriptor: ComponentDescriptor) -> Rule:
    """
    Rebuild a rule graph on series.

    Raises:
        MalformedDescriptorError: If a descriptor has no type, a parameter is
            missing or invalid, or the components do not fit the rule
        UnknownComponentTypeError: If a type is not a registered rule or indicator
    """
    if descriptor is None or descriptor.type is None:
        raise MalformedDescriptorError("Rule descriptor must have a type")
    codec = _CODECS_BY_NAME.get(descriptor.type)
    if codec is None:
        raise UnknownComponentTypeError(f"Unknown rule type: {descriptor.type}")

    children = [_component_from_descriptor(series, child) for child in descriptor.components]
    try:
        rule = codec.build(series, _Parameters(descriptor.type, descriptor.parameters), children)
    except (TypeError, ValueError) as e:
        if isinstance(e, (MalformedDescriptorError, UnknownComponentTypeError)):
            raise
        raise MalformedDescriptorError(f"Invalid {descriptor.type} descriptor: {e}")

    if descriptor.label is not None:
        rule.set_name(descriptor.label)
    return rule


def describe_strategy(strategy: BaseStrategy) -> ComponentDescriptor:
    """Describe a strategy as BaseStrategy(entry, exit) with its unstable bar count."""
    return ComponentDescriptor(
        type=STRATEGY_TYPE_NAME,
        label=strategy.name,
        parameters={"unstableBars": strategy.unstable_bars},
        components=(describe_rule(strategy.entry_rule), describe_rule(strategy.exit_rule)),
    )


def strategy_from_descriptor(series: BarSeries, descriptor: ComponentDescriptor) -> BaseStrategy:
    """
    Rebuild a strategy on series.

    Raises:
        MalformedDescriptorError: If the descriptor is not a two-rule BaseStrategy
    """
    if descriptor is None or descriptor.type is None:
        raise MalformedDescriptorError("Strategy descriptor must have a type")
    if descriptor.type != STRATEGY_TYPE_NAME:
        raise UnknownComponentTypeError(f"Unknown strategy type: {descriptor.type}")
    if len(descriptor.components) != 2:
        raise MalformedDescriptorError(
            f"Strategy descriptor needs entry and exit rules, got {len(descriptor.components)} components"
        )
    params = _Parameters(STRATEGY_TYPE_NAME, descriptor.parameters)
    unstable_bars = params.integer("unstableBars") if "unstableBars" in descriptor.parameters else UNSTABLE_BARS
    entry_rule = rule_from_descriptor(series, descriptor.components[0])
    exit_rule = rule_from_descriptor(series, descriptor.components[1])
    try:
        return BaseStrategy(entry_rule, exit_rule, unstable_bars, name=descriptor.label)
    except ValueError as e:
        raise MalformedDescriptorError(f"Invalid strategy descriptor: {e}")
