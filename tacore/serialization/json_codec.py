"""
JSON form of component descriptors.

Field order is type, label, parameters, then the child list. Strategies list
their children under "rules", everything else under "components". Empty
fields are omitted. Parsing also accepts the legacy "children" and
"baseIndicators" child fields.
"""
import json
from typing import Any, Dict, Mapping, Optional

from .descriptor import ComponentDescriptor
from .errors import MalformedDescriptorError

FIELD_TYPE = "type"
FIELD_LABEL = "label"
FIELD_PARAMETERS = "parameters"
FIELD_COMPONENTS = "components"
FIELD_RULES = "rules"
LEGACY_CHILD_FIELDS = ("children", "baseIndicators")


def _children_field(descriptor: ComponentDescriptor) -> str:
    if descriptor.type is not None and descriptor.type.endswith("Strategy"):
        return FIELD_RULES
    return FIELD_COMPONENTS


def _encode_value(value: Any) -> Any:
    if isinstance(value, ComponentDescriptor):
        return to_dict(value)
    if isinstance(value, (list, tuple)):
        return [_encode_value(v) for v in value]
    if isinstance(value, Mapping):
        return {key: _encode_value(v) for key, v in value.items()}
    return value


def to_dict(descriptor: Optional[ComponentDescriptor]) -> Optional[Dict[str, Any]]:
    """Render a descriptor as plain JSON-compatible data (None stays None)."""
    if descriptor is None:
        return None
    data: Dict[str, Any] = {}
    if descriptor.type is not None:
        data[FIELD_TYPE] = descriptor.type
    if descriptor.label is not None:
        data[FIELD_LABEL] = descriptor.label
    if descriptor.parameters:
        data[FIELD_PARAMETERS] = {
            key: _encode_value(value) for key, value in descriptor.parameters.items()
        }
    if descriptor.components:
        data[_children_field(descriptor)] = [to_dict(c) for c in descriptor.components]
    return data


def to_json(descriptor: Optional[ComponentDescriptor]) -> str:
    """Compact JSON text for a descriptor."""
    return json.dumps(to_dict(descriptor), separators=(",", ":"))


def from_dict(data: Any) -> Optional[ComponentDescriptor]:
    """
    Build a descriptor from parsed JSON data.

    A string becomes a label-only descriptor and None stays None.

    Raises:
        MalformedDescriptorError: If data is not a mapping, string or None, or
            a field has the wrong shape
    """
    if data is None:
        return None
    if isinstance(data, str):
        return ComponentDescriptor.label_only(data)
    if not isinstance(data, Mapping):
        raise MalformedDescriptorError(f"Unsupported component descriptor payload: {data!r}")

    type_name = data.get(FIELD_TYPE)
    label = data.get(FIELD_LABEL)
    if type_name is not None and not isinstance(type_name, str):
        raise MalformedDescriptorError(f"Descriptor type must be a string, got {type_name!r}")
    if label is not None and not isinstance(label, str):
        raise MalformedDescriptorError(f"Descriptor label must be a string, got {label!r}")

    parameters = data.get(FIELD_PARAMETERS) or {}
    if not isinstance(parameters, Mapping):
        raise MalformedDescriptorError(f"Descriptor parameters must be an object, got {parameters!r}")

    children = None
    for key in (FIELD_RULES, FIELD_COMPONENTS) + LEGACY_CHILD_FIELDS:
        if key in data:
            children = data[key]
            break
    if children is None:
        children = []
    if not isinstance(children, list):
        raise MalformedDescriptorError(f"Descriptor components must be a list, got {children!r}")

    return ComponentDescriptor(
        type=type_name,
        label=label,
        parameters=dict(parameters),
        components=tuple(from_dict(child) for child in children),
    )


def parse_descriptor(text: Optional[str]) -> Optional[ComponentDescriptor]:
    """
    Parse descriptor JSON text.

    None, blank text and the JSON literal null give None. Text that is not
    valid JSON is kept as a label-only descriptor (a plain rule name).

    Raises:
        MalformedDescriptorError: If the JSON is valid but not an object or string
    """
    if text is None or not text.strip():
        return None
    try:
        data = json.loads(text.strip())
    except json.JSONDecodeError:
        return ComponentDescriptor.label_only(text)
    return from_dict(data)
