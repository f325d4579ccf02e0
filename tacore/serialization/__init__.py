"""
Serialization module.

Converts rule graphs, indicators and strategies to ComponentDescriptor trees
and back, renders descriptors as JSON, and compares them structurally.
"""
from .errors import (
    SerializationError,
    UnsupportedSerializationError,
    MalformedDescriptorError,
    UnknownComponentTypeError,
)
from .descriptor import ComponentDescriptor, structurally_equal, values_equal
from .json_codec import to_dict, from_dict, to_json, parse_descriptor
from .indicator_serialization import describe_indicator, indicator_from_descriptor
from .rule_serialization import (
    describe_rule,
    rule_from_descriptor,
    is_serialization_supported,
    num_factory_names,
    describe_strategy,
    strategy_from_descriptor,
)

__all__ = [
    'SerializationError',
    'UnsupportedSerializationError',
    'MalformedDescriptorError',
    'UnknownComponentTypeError',
    'ComponentDescriptor',
    'structurally_equal',
    'values_equal',
    'to_dict',
    'from_dict',
    'to_json',
    'parse_descriptor',
    'describe_indicator',
    'indicator_from_descriptor',
    'describe_rule',
    'rule_from_descriptor',
    'is_serialization_supported',
    'num_factory_names',
    'describe_strategy',
    'strategy_from_descriptor',
]
