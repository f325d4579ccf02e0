"""
Descriptor codec for the indicators referenced by rules.

Only the indicator kinds registered here can be described; anything else
raises UnsupportedSerializationError.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, NamedTuple, Type

from .descriptor import ComponentDescriptor
from .errors import (
    MalformedDescriptorError,
    UnknownComponentTypeError,
    UnsupportedSerializationError,
)
from ..indicators import (
    ATRIndicator,
    ClosePriceIndicator,
    ConstantIndicator,
    DateTimeIndicator,
    HighPriceIndicator,
    Indicator,
    LowPriceIndicator,
    OpenPriceIndicator,
    PreviousValueIndicator,
    StandardDeviationIndicator,
    TrueRangeIndicator,
    VolumeIndicator,
)
from ..series import BarSeries


class _IndicatorCodec(NamedTuple):
    type_name: str
    describe: Callable[[Indicator], Dict[str, Any]]  # -> {"parameters": ..., "components": [...]}
    build: Callable[[BarSeries, Dict[str, Any], List[Indicator]], Indicator]


def _no_parameters(indicator: Indicator) -> Dict[str, Any]:
    return {}


def _bar_field(cls):
    return lambda series, params, children: cls(series)


def whole_number(value) -> int:
    """
    Integer value of a descriptor parameter.

    Accepts ints, integral floats and numeric text with no fractional part
    ("14", "14.0"). Anything else, including 5.7 and booleans, raises ValueError.
    """
    if isinstance(value, bool):
        raise ValueError(f"not an integer: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"not an integer: {value!r}")
        return int(value)
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"not an integer: {value!r}")
        if not parsed.is_finite() or parsed != parsed.to_integral_value():
            raise ValueError(f"not an integer: {value!r}")
        return int(parsed)
    raise ValueError(f"not an integer: {value!r}")


def _int_parameter(params: Dict[str, Any], key: str, type_name: str) -> int:
    try:
        value = params[key]
    except KeyError:
        raise MalformedDescriptorError(f"{type_name} descriptor is missing parameter '{key}'")
    try:
        return whole_number(value)
    except ValueError:
        raise MalformedDescriptorError(f"{type_name} parameter '{key}' must be an integer, got {value!r}")


def _single_child(children: List[Indicator], type_name: str) -> Indicator:
    if len(children) != 1:
        raise MalformedDescriptorError(
            f"{type_name} descriptor needs exactly 1 component, got {len(children)}"
        )
    return children[0]


def _build_constant(series, params, children):
    if "value" not in params:
        raise MalformedDescriptorError("ConstantIndicator descriptor is missing parameter 'value'")
    try:
        return ConstantIndicator(series, series.num_factory.num_of(params["value"]))
    except (TypeError, ValueError) as e:
        raise MalformedDescriptorError(f"ConstantIndicator value is not a number: {e}")


_CODECS: Dict[Type[Indicator], _IndicatorCodec] = {
    ClosePriceIndicator: _IndicatorCodec("ClosePriceIndicator", _no_parameters, _bar_field(ClosePriceIndicator)),
    OpenPriceIndicator: _IndicatorCodec("OpenPriceIndicator", _no_parameters, _bar_field(OpenPriceIndicator)),
    HighPriceIndicator: _IndicatorCodec("HighPriceIndicator", _no_parameters, _bar_field(HighPriceIndicator)),
    LowPriceIndicator: _IndicatorCodec("LowPriceIndicator", _no_parameters, _bar_field(LowPriceIndicator)),
    VolumeIndicator: _IndicatorCodec("VolumeIndicator", _no_parameters, _bar_field(VolumeIndicator)),
    DateTimeIndicator: _IndicatorCodec("DateTimeIndicator", _no_parameters, _bar_field(DateTimeIndicator)),
    TrueRangeIndicator: _IndicatorCodec("TrueRangeIndicator", _no_parameters, _bar_field(TrueRangeIndicator)),
    ConstantIndicator: _IndicatorCodec(
        "ConstantIndicator",
        lambda ind: {"parameters": {"value": str(ind.value)}},
        _build_constant,
    ),
    ATRIndicator: _IndicatorCodec(
        "ATRIndicator",
        lambda ind: {"parameters": {"barCount": ind.bar_count}},
        lambda series, params, children: ATRIndicator(
            series, _int_parameter(params, "barCount", "ATRIndicator")
        ),
    ),
    StandardDeviationIndicator: _IndicatorCodec(
        "StandardDeviationIndicator",
        lambda ind: {"parameters": {"barCount": ind.bar_count}, "components": [ind.indicator]},
        lambda series, params, children: StandardDeviationIndicator(
            _single_child(children, "StandardDeviationIndicator"),
            _int_parameter(params, "barCount", "StandardDeviationIndicator"),
        ),
    ),
    PreviousValueIndicator: _IndicatorCodec(
        "PreviousValueIndicator",
        lambda ind: {"parameters": {"n": ind.n}, "components": [ind.indicator]},
        lambda series, params, children: PreviousValueIndicator(
            _single_child(children, "PreviousValueIndicator"),
            _int_parameter(params, "n", "PreviousValueIndicator"),
        ),
    ),
}

_CODECS_BY_NAME: Dict[str, _IndicatorCodec] = {codec.type_name: codec for codec in _CODECS.values()}

INDICATOR_TYPE_NAMES = frozenset(_CODECS_BY_NAME)


def describe_indicator(indicator: Indicator) -> ComponentDescriptor:
    """
    Describe an indicator.

    Raises:
        UnsupportedSerializationError: If the indicator kind has no codec
    """
    codec = _CODECS.get(type(indicator))
    if codec is None:
        raise UnsupportedSerializationError(
            f"Indicator type {type(indicator).__name__} is not supported for serialization"
        )
    described = codec.describe(indicator)
    return ComponentDescriptor(
        type=codec.type_name,
        parameters=described.get("parameters", {}),
        components=tuple(describe_indicator(child) for child in described.get("components", [])),
    )


def indicator_from_descriptor(series: BarSeries, descriptor: ComponentDescriptor) -> Indicator:
    """
    Rebuild an indicator on series.

    Raises:
        MalformedDescriptorError: If the descriptor has no type or bad parameters
        UnknownComponentTypeError: If the type is not a known indicator
    """
    if descriptor is None or descriptor.type is None:
        raise MalformedDescriptorError("Indicator descriptor must have a type")
    codec = _CODECS_BY_NAME.get(descriptor.type)
    if codec is None:
        raise UnknownComponentTypeError(f"Unknown indicator type: {descriptor.type}")
    children = [indicator_from_descriptor(series, child) for child in descriptor.components]
    try:
        return codec.build(series, descriptor.parameters, children)
    except (TypeError, ValueError) as e:
        if isinstance(e, MalformedDescriptorError):
            raise
        raise MalformedDescriptorError(f"Invalid {descriptor.type} descriptor: {e}")
