"""
Registry attribute values.

A value fetched from the registry is one of a closed set of shapes. The
shape is decided once, at the registry client boundary, by
:meth:`RawValue.from_registry`; everything downstream works on the
normalized form, an ordered list of strings.
"""
from collections import namedtuple
from enum import Enum

from .exception import UnsupportedValueShapeError


class ValueShape(Enum):
    ABSENT = "absent"
    NULL = "null"
    SCALAR = "scalar"
    LIST = "list"
    KEYED = "keyed"


class RawValue(namedtuple("RawValue", ["shape", "value"])):
    """
    A registry attribute value tagged with its shape.

    ABSENT means the registry did not return the attribute at all, NULL that
    it returned it without a value. SCALAR holds a string, LIST a tuple of
    strings and KEYED a mapping whose keys (e.g. language tags) carry no
    meaning for the released attribute.
    """

    __slots__ = ()

    @classmethod
    def from_registry(cls, attribute_name, value):
        """
        Classify a decoded registry value.

        :type attribute_name: str
        :type value: Any
        :rtype: RawValue

        :param attribute_name: name of the attribute, reported on failure
        :param value: the value as decoded from the registry response
        :raise UnsupportedValueShapeError: if the value has no known shape
        """
        if value is None:
            return NULL
        if isinstance(value, str):
            return cls(ValueShape.SCALAR, value)
        if isinstance(value, (list, tuple)):
            if not all(isinstance(item, str) for item in value):
                raise UnsupportedValueShapeError(attribute_name, value)
            return cls(ValueShape.LIST, tuple(value))
        if isinstance(value, dict):
            if not all(isinstance(item, str) for item in value.values()):
                raise UnsupportedValueShapeError(attribute_name, value)
            return cls(ValueShape.KEYED, dict(value))
        raise UnsupportedValueShapeError(attribute_name, value)


ABSENT = RawValue(ValueShape.ABSENT, None)
NULL = RawValue(ValueShape.NULL, None)

_NORMALIZERS = {
    ValueShape.ABSENT: lambda value: [],
    ValueShape.NULL: lambda value: [],
    ValueShape.SCALAR: lambda value: [value],
    ValueShape.LIST: lambda value: list(value),
    ValueShape.KEYED: lambda value: list(value.values()),
}


def normalize(raw, attribute_name=None):
    """
    Convert a registry value into an ordered list of strings.

    :type raw: RawValue | None | str | list[str] | dict[str, str]
    :type attribute_name: str
    :rtype: list[str]

    :param raw: a classified value, or a plain decoded value which is
                classified first
    :param attribute_name: name of the attribute, reported on failure
    :return: the values, in the order the registry returned them
    """
    if not isinstance(raw, RawValue):
        raw = RawValue.from_registry(attribute_name, raw)
    return _NORMALIZERS[raw.shape](raw.value)
