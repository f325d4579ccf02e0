"""
Serialization errors.

UnsupportedSerializationError is a capability signal: the rule or indicator
kind has no codec, callers may catch it and skip. Malformed descriptors and
unknown types are hard failures and also ValueErrors.
"""


class SerializationError(Exception):
    """Base class for descriptor codec errors."""
    pass


class UnsupportedSerializationError(SerializationError):
    """The component kind cannot be described or rebuilt."""
    pass


class MalformedDescriptorError(SerializationError, ValueError):
    """Descriptor is missing its type, a required parameter or a component."""
    pass


class UnknownComponentTypeError(SerializationError, ValueError):
    """Descriptor type is not a registered component kind."""
    pass
