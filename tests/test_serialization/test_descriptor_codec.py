"""
Tests for component descriptors, the JSON codec and rule/strategy serialization.
"""
from datetime import time

import pytest
from tacore.indicators import (
    ATRIndicator,
    ClosePriceIndicator,
    DateTimeIndicator,
    Indicator,
    PreviousValueIndicator,
    StandardDeviationIndicator,
)
from tacore.rules import (
    AndRule,
    AverageTrueRangeTrailingStopLossRule,
    BaseStrategy,
    BooleanRule,
    ChainLink,
    ChainRule,
    DayOfWeek,
    DayOfWeekRule,
    FixedRule,
    HourOfDayRule,
    JustOnceRule,
    NotRule,
    OrRule,
    OrWithThresholdRule,
    OverIndicatorRule,
    Rule,
    StopLossRule,
    TimeRange,
    TimeRangeRule,
    VolatilityStopGainRule,
    VoteRule,
    WaitForRule,
)
from tacore.serialization import (
    ComponentDescriptor,
    MalformedDescriptorError,
    UnknownComponentTypeError,
    UnsupportedSerializationError,
    describe_indicator,
    describe_rule,
    describe_strategy,
    from_dict,
    indicator_from_descriptor,
    is_serialization_supported,
    parse_descriptor,
    rule_from_descriptor,
    strategy_from_descriptor,
    structurally_equal,
    to_dict,
    to_json,
    values_equal,
)
from tacore.series import BarSeries
from tacore.trading import TradeType


@pytest.fixture
def series():
    return BarSeries.from_close_prices([100, 101, 102, 103, 104], start="2021-06-07 09:00", freq="h")


class AlwaysRule(Rule):
    """Rule kind without a codec."""

    TYPE_NAME = "AlwaysRule"

    def is_satisfied(self, index, trading_record=None):
        return True


class MidpointIndicator(Indicator):
    """Indicator kind without a codec."""

    def get_value(self, index):
        bar = self.series.get_bar(index)
        return (bar.high_price + bar.low_price) / 2


def _round_trip(series, rule):
    descriptor = describe_rule(rule)
    rebuilt = rule_from_descriptor(series, parse_descriptor(to_json(descriptor)))
    return descriptor, describe_rule(rebuilt), rebuilt


class TestDescriptor:
    """Descriptor value semantics."""

    def test_defaults(self):
        descriptor = ComponentDescriptor()

        assert descriptor.is_empty()
        assert descriptor.parameters == {}
        assert descriptor.components == ()

    def test_components_become_tuple(self):
        child = ComponentDescriptor.type_only("FixedRule")
        descriptor = ComponentDescriptor(type="NotRule", components=[child])

        assert descriptor.components == (child,)

    def test_with_label(self):
        descriptor = ComponentDescriptor(type="FixedRule", parameters={"indexes": [1]})
        labelled = descriptor.with_label("Entry")

        assert labelled.label == "Entry"
        assert labelled.parameters == {"indexes": [1]}
        assert descriptor.label is None


class TestStructuralEquality:
    """Structural comparison of descriptors and parameter values."""

    def test_numeric_strings(self):
        assert values_equal("5", "5.00")
        assert values_equal(5, "5.0")
        assert not values_equal("5", "5.01")

    def test_booleans_are_not_numbers(self):
        assert not values_equal(True, 1)
        assert values_equal(False, False)

    def test_collections(self):
        assert values_equal([1, "2.0"], ["1", 2])
        assert not values_equal([1, 2], [2, 1])
        assert values_equal({"a": "1.50"}, {"a": 1.5})
        assert not values_equal({"a": 1}, {"b": 1})

    def test_descriptors(self):
        left = ComponentDescriptor(type="StopLossRule", parameters={"percentage": "5"})
        right = ComponentDescriptor(type="StopLossRule", parameters={"percentage": "5.00"})

        assert structurally_equal(left, right)
        assert not structurally_equal(left, right.with_label("Exit"))
        assert structurally_equal(None, None)
        assert not structurally_equal(left, None)

    def test_component_order_matters(self):
        a = ComponentDescriptor.type_only("A")
        b = ComponentDescriptor.type_only("B")

        assert not structurally_equal(
            ComponentDescriptor(type="AndRule", components=(a, b)),
            ComponentDescriptor(type="AndRule", components=(b, a)),
        )


class TestJsonCodec:
    """JSON layout and parsing edge cases."""

    def test_field_order_and_compactness(self):
        descriptor = ComponentDescriptor(
            type="StopLossRule",
            label="Exit",
            parameters={"percentage": "5"},
            components=(ComponentDescriptor.type_only("ClosePriceIndicator"),),
        )

        assert to_json(descriptor) == (
            '{"type":"StopLossRule","label":"Exit","parameters":{"percentage":"5"},'
            '"components":[{"type":"ClosePriceIndicator"}]}'
        )

    def test_empty_fields_omitted(self):
        assert to_dict(ComponentDescriptor.type_only("FixedRule")) == {"type": "FixedRule"}
        assert to_json(None) == "null"

    def test_strategy_children_are_rules(self):
        descriptor = ComponentDescriptor(
            type="BaseStrategy",
            components=(ComponentDescriptor.type_only("A"), ComponentDescriptor.type_only("B")),
        )
        data = to_dict(descriptor)

        assert "rules" in data
        assert "components" not in data

    @pytest.mark.parametrize("text", [None, "", "   ", "null"])
    def test_empty_input(self, text):
        assert parse_descriptor(text) is None

    def test_invalid_json_is_label(self):
        descriptor = parse_descriptor("My Entry Rule")

        assert descriptor.label == "My Entry Rule"
        assert descriptor.type is None

    def test_json_string_is_label(self):
        assert parse_descriptor('"Entry"') == ComponentDescriptor.label_only("Entry")

    @pytest.mark.parametrize("text", ["42", "true", "[1, 2]"])
    def test_unsupported_payload(self, text):
        with pytest.raises(MalformedDescriptorError, match="Unsupported component descriptor payload"):
            parse_descriptor(text)

    def test_legacy_child_fields(self):
        for field in ("children", "baseIndicators"):
            descriptor = from_dict({"type": "NotRule", field: [{"type": "BooleanRule"}]})
            assert descriptor.components == (ComponentDescriptor.type_only("BooleanRule"),)

    def test_bad_field_shapes(self):
        with pytest.raises(MalformedDescriptorError, match="parameters must be an object"):
            from_dict({"type": "FixedRule", "parameters": [1]})
        with pytest.raises(MalformedDescriptorError, match="components must be a list"):
            from_dict({"type": "NotRule", "components": {"type": "BooleanRule"}})
        with pytest.raises(MalformedDescriptorError, match="type must be a string"):
            from_dict({"type": 3})


class TestRuleRoundTrip:
    """describe -> JSON -> rebuild -> describe is structurally stable."""

    def test_nested_boolean_rules(self, series):
        close = ClosePriceIndicator(series)
        rule = AndRule(
            OrRule(FixedRule(1, 2), NotRule(BooleanRule.TRUE)),
            StopLossRule(close, 5),
        )
        original, again, rebuilt = _round_trip(series, rule)

        assert structurally_equal(original, again)
        assert isinstance(rebuilt, AndRule)
        assert isinstance(rebuilt.rule1.rule2, NotRule)
        assert isinstance(rebuilt.rule2, StopLossRule)
        assert [rebuilt.is_satisfied(i) for i in range(5)] == [rule.is_satisfied(i) for i in range(5)]

    def test_custom_names_become_labels(self, series):
        rule = AndRule(FixedRule(1).set_name("Entry"), FixedRule(2)).set_name("Both")
        descriptor = describe_rule(rule)

        assert descriptor.label == "Both"
        assert descriptor.components[0].label == "Entry"
        assert descriptor.components[1].label is None

        rebuilt = rule_from_descriptor(series, descriptor)
        assert rebuilt.name == "Both"
        assert rebuilt.rule1.name == "Entry"
        assert not rebuilt.rule2.has_custom_name

    @pytest.mark.parametrize("build", [
        lambda s: BooleanRule(False),
        lambda s: FixedRule(0, 3),
        lambda s: OrWithThresholdRule(FixedRule(1), FixedRule(2), 3),
        lambda s: VoteRule(2, FixedRule(1), FixedRule(2), BooleanRule.TRUE),
        lambda s: ChainRule(FixedRule(1), ChainLink(FixedRule(2), 3), ChainLink(FixedRule(4), 1)),
        lambda s: JustOnceRule(FixedRule(2)),
        lambda s: WaitForRule(TradeType.SELL, 4),
        lambda s: AverageTrueRangeTrailingStopLossRule(s, bar_count=5, coefficient="1.5"),
        lambda s: VolatilityStopGainRule(ClosePriceIndicator(s), bar_count=3, coefficient=2),
        lambda s: OverIndicatorRule(PreviousValueIndicator(ClosePriceIndicator(s), 2), 101),
        lambda s: HourOfDayRule(DateTimeIndicator(s), 9, 10),
        lambda s: DayOfWeekRule(DateTimeIndicator(s), DayOfWeek.MONDAY, DayOfWeek.FRIDAY),
        lambda s: TimeRangeRule([TimeRange(time(9, 0), time(17, 30))], DateTimeIndicator(s)),
    ])
    def test_supported_kinds(self, series, build):
        rule = build(series)
        original, again, rebuilt = _round_trip(series, rule)

        assert structurally_equal(original, again)
        assert type(rebuilt) is type(rule)

    def test_parameter_encoding(self, series):
        descriptor = describe_rule(
            TimeRangeRule([TimeRange(time(9, 0), time(17, 30))], DateTimeIndicator(series))
        )

        assert descriptor.parameters == {"timeRanges": [{"from": "09:00:00", "to": "17:30:00"}]}
        assert descriptor.components == (ComponentDescriptor.type_only("DateTimeIndicator"),)
        assert describe_rule(WaitForRule(TradeType.BUY, 2)).parameters == {"tradeType": "BUY", "barCount": 2}
        assert describe_rule(
            DayOfWeekRule(DateTimeIndicator(series), "monday")
        ).parameters == {"daysOfWeek": ["MONDAY"]}


class TestIndicatorSerialization:
    """Indicators referenced by rules."""

    def test_nested_indicator(self, series):
        indicator = StandardDeviationIndicator(PreviousValueIndicator(ClosePriceIndicator(series), 1), 4)
        descriptor = describe_indicator(indicator)

        assert to_dict(descriptor) == {
            "type": "StandardDeviationIndicator",
            "parameters": {"barCount": 4},
            "components": [{
                "type": "PreviousValueIndicator",
                "parameters": {"n": 1},
                "components": [{"type": "ClosePriceIndicator"}],
            }],
        }
        rebuilt = indicator_from_descriptor(series, descriptor)
        assert structurally_equal(describe_indicator(rebuilt), descriptor)

    def test_atr(self, series):
        rebuilt = indicator_from_descriptor(series, describe_indicator(ATRIndicator(series, 7)))
        assert isinstance(rebuilt, ATRIndicator)
        assert rebuilt.bar_count == 7

    def test_unknown_indicator(self, series):
        with pytest.raises(UnknownComponentTypeError, match="Unknown indicator type"):
            indicator_from_descriptor(series, ComponentDescriptor.type_only("MysteryIndicator"))

    def test_bad_parameter(self, series):
        descriptor = ComponentDescriptor(type="ATRIndicator", parameters={"barCount": "many"})
        with pytest.raises(MalformedDescriptorError, match="must be an integer"):
            indicator_from_descriptor(series, descriptor)

    def test_fractional_bar_count(self, series):
        descriptor = ComponentDescriptor(type="ATRIndicator", parameters={"barCount": 5.7})
        with pytest.raises(MalformedDescriptorError, match="must be an integer, got 5.7"):
            indicator_from_descriptor(series, descriptor)


class TestUnsupported:
    """Rules and indicators without a codec."""

    def test_unsupported_rule(self):
        with pytest.raises(UnsupportedSerializationError, match="AlwaysRule"):
            describe_rule(AlwaysRule())

    def test_unsupported_child(self, series):
        rule = AndRule(FixedRule(1), AlwaysRule())

        assert not is_serialization_supported(rule)
        assert is_serialization_supported(FixedRule(1))

    def test_unsupported_indicator(self, series):
        rule = OverIndicatorRule(MidpointIndicator(series), 100)
        with pytest.raises(UnsupportedSerializationError, match="MidpointIndicator"):
            describe_rule(rule)


class TestMalformed:
    """Bad descriptors fail with descriptive errors."""

    def test_missing_type(self, series):
        with pytest.raises(MalformedDescriptorError, match="must have a type"):
            rule_from_descriptor(series, ComponentDescriptor.label_only("Entry"))

    def test_unknown_type(self, series):
        with pytest.raises(UnknownComponentTypeError, match="Unknown rule type: MysteryRule"):
            rule_from_descriptor(series, ComponentDescriptor.type_only("MysteryRule"))

    def test_missing_parameter(self, series):
        descriptor = ComponentDescriptor(
            type="StopLossRule",
            components=(ComponentDescriptor.type_only("ClosePriceIndicator"),),
        )
        with pytest.raises(MalformedDescriptorError, match="missing parameter 'percentage'"):
            rule_from_descriptor(series, descriptor)

    def test_wrong_component_count(self, series):
        descriptor = ComponentDescriptor(
            type="AndRule",
            components=(ComponentDescriptor(type="BooleanRule", parameters={"value": True}),),
        )
        with pytest.raises(MalformedDescriptorError, match="needs 2 components"):
            rule_from_descriptor(series, descriptor)

    def test_invalid_value(self, series):
        descriptor = ComponentDescriptor(
            type="StopLossRule",
            parameters={"percentage": "-5"},
            components=(ComponentDescriptor.type_only("ClosePriceIndicator"),),
        )
        with pytest.raises(MalformedDescriptorError, match="Percentage must be positive"):
            rule_from_descriptor(series, descriptor)

    @pytest.mark.parametrize("threshold", [5.7, "2.5", "1e-1", "inf", "NaN"])
    def test_fractional_integer_rejected(self, series, threshold):
        descriptor = ComponentDescriptor(
            type="OrWithThresholdRule",
            parameters={"threshold": threshold},
            components=(
                ComponentDescriptor(type="FixedRule", parameters={"indexes": [1]}),
                ComponentDescriptor(type="FixedRule", parameters={"indexes": [2]}),
            ),
        )
        with pytest.raises(MalformedDescriptorError, match="'threshold' must be an integer"):
            rule_from_descriptor(series, descriptor)

    def test_fractional_list_item_rejected(self, series):
        descriptor = ComponentDescriptor(type="FixedRule", parameters={"indexes": [1, 2.5]})
        with pytest.raises(MalformedDescriptorError, match="'indexes' must be a list of integers"):
            rule_from_descriptor(series, descriptor)

    def test_whole_number_forms_accepted(self, series):
        descriptor = ComponentDescriptor(type="FixedRule", parameters={"indexes": ["3", 4.0, " 5 "]})
        rebuilt = rule_from_descriptor(series, descriptor)

        assert list(rebuilt.indexes) == [3, 4, 5]

    def test_errors_are_value_errors(self, series):
        with pytest.raises(ValueError):
            rule_from_descriptor(series, ComponentDescriptor.type_only("MysteryRule"))

    def test_chain_threshold_count(self, series):
        descriptor = ComponentDescriptor(
            type="ChainRule",
            parameters={"thresholds": [1, 2]},
            components=(
                ComponentDescriptor(type="FixedRule", parameters={"indexes": [1]}),
                ComponentDescriptor(type="FixedRule", parameters={"indexes": [2]}),
            ),
        )
        with pytest.raises(MalformedDescriptorError, match="1 links but 2 thresholds"):
            rule_from_descriptor(series, descriptor)


class TestStrategySerialization:
    """Strategies serialize as BaseStrategy with entry and exit rules."""

    def test_round_trip(self, series):
        strategy = BaseStrategy(
            FixedRule(1).set_name("Entry"),
            StopLossRule(ClosePriceIndicator(series), 3),
            unstable_bars=2,
            name="Breakout",
        )
        descriptor = describe_strategy(strategy)
        text = to_json(descriptor)

        assert text.startswith('{"type":"BaseStrategy","label":"Breakout","parameters":{"unstableBars":2},"rules":[')

        rebuilt = strategy_from_descriptor(series, parse_descriptor(text))
        assert rebuilt.name == "Breakout"
        assert rebuilt.unstable_bars == 2
        assert rebuilt.entry_rule.name == "Entry"
        assert structurally_equal(describe_strategy(rebuilt), descriptor)

    def test_needs_two_rules(self, series):
        descriptor = ComponentDescriptor(
            type="BaseStrategy",
            components=(ComponentDescriptor(type="BooleanRule", parameters={"value": True}),),
        )
        with pytest.raises(MalformedDescriptorError, match="needs entry and exit rules"):
            strategy_from_descriptor(series, descriptor)

    def test_unknown_strategy_type(self, series):
        with pytest.raises(UnknownComponentTypeError):
            strategy_from_descriptor(series, ComponentDescriptor.type_only("FancyStrategy"))
