"""
ComponentDescriptor: portable description of a rule, indicator or strategy.

A descriptor carries a type name, an optional label (the component's custom
name), ordered parameters and ordered child components. Parameter values are
scalars, lists, mappings or nested descriptors.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class ComponentDescriptor:
    """Immutable descriptor node. Child order is significant."""
    type: Optional[str] = None
    label: Optional[str] = None
    parameters: Dict[str, Any] = field(default_factory=dict)
    components: Tuple[Optional["ComponentDescriptor"], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "parameters", dict(self.parameters or {}))
        object.__setattr__(self, "components", tuple(self.components or ()))

    @classmethod
    def label_only(cls, label: str) -> "ComponentDescriptor":
        return cls(label=label)

    @classmethod
    def type_only(cls, type_name: str) -> "ComponentDescriptor":
        return cls(type=type_name)

    def with_label(self, label: Optional[str]) -> "ComponentDescriptor":
        return ComponentDescriptor(self.type, label, self.parameters, self.components)

    def is_empty(self) -> bool:
        return (
            self.type is None
            and self.label is None
            and not self.parameters
            and not self.components
        )


def _as_decimal(value) -> Optional[Decimal]:
    """Parse ints, floats, Decimals and numeric strings; None for anything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def _descriptor_as_mapping(value) -> Any:
    if isinstance(value, ComponentDescriptor):
        from .json_codec import to_dict
        return to_dict(value)
    return value


def values_equal(left: Any, right: Any) -> bool:
    """
    Compare parameter values structurally.

    Numbers and numeric-looking strings compare by parsed decimal value, so
    "5", "5.00", 5 and 5.0 are equal. Lists compare positionally, mappings by
    key set then value, descriptors structurally.
    """
    if isinstance(left, ComponentDescriptor) and isinstance(right, ComponentDescriptor):
        return structurally_equal(left, right)
    left = _descriptor_as_mapping(left)
    right = _descriptor_as_mapping(right)

    if isinstance(left, bool) or isinstance(right, bool):
        return left is right
    left_num, right_num = _as_decimal(left), _as_decimal(right)
    if left_num is not None and right_num is not None:
        return left_num == right_num
    if isinstance(left, dict) and isinstance(right, dict):
        if set(left) != set(right):
            return False
        return all(values_equal(left[key], right[key]) for key in left)
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right))
    return left == right


def structurally_equal(left: Optional[ComponentDescriptor], right: Optional[ComponentDescriptor]) -> bool:
    """
    Structural equality of two descriptors.

    type and label must match exactly; parameters must have the same keys and
    equal values (see values_equal); components are compared positionally.
    """
    if left is None or right is None:
        return left is right
    if left.type != right.type or left.label != right.label:
        return False
    if set(left.parameters) != set(right.parameters):
        return False
    for key, value in left.parameters.items():
        if not values_equal(value, right.parameters[key]):
            return False
    if len(left.components) != len(right.components):
        return False
    return all(structurally_equal(a, b) for a, b in zip(left.components, right.components))
