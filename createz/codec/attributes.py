"""
Typed access to self-describing attribute lists.

Raw attributes are tagged once (string, integer or address) and coerced on
read. The first occurrence of a trait name wins; later duplicates are
ignored.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Mapping, Union

from eth_utils.address import is_hex_address, to_checksum_address

from ..errors import AttributeNotFound, AttributeTypeMismatch, MalformedMetadata
from ..types import Address
from .schemas import Attribute

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"^-?\d+$")


class ValueTag(Enum):
    """How a raw attribute value is stored."""
    STRING = "string"
    INTEGER = "integer"
    ADDRESS = "address"


class AttributeType(Enum):
    """Types an attribute can be read as."""
    STRING = "string"
    INTEGER = "integer"
    ADDRESS = "address"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class AttributeValue:
    tag: ValueTag
    value: Union[str, int]

    @classmethod
    def of(cls, value: Any) -> "AttributeValue":
        # bool is an int subclass but never a valid attribute value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(ValueTag.INTEGER, value)
        if isinstance(value, str):
            # Only 0x-prefixed hex is an address; bare 40 digit strings may be amounts
            if value.startswith(("0x", "0X")) and is_hex_address(value):
                return cls(ValueTag.ADDRESS, value)
            return cls(ValueTag.STRING, value)
        raise TypeError(f"Unsupported attribute value: {value!r}")


class AttributeAccessor(Mapping):
    """Read-only, typed view over an attribute list."""

    def __init__(self, values: Dict[str, AttributeValue]):
        self._values = values

    def __getitem__(self, name: str) -> AttributeValue:
        try:
            return self._values[name]
        except KeyError:
            raise AttributeNotFound(name) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def as_integer(self, name: str) -> int:
        item = self[name]
        if item.tag is ValueTag.INTEGER:
            return item.value
        if item.tag is ValueTag.STRING and _INTEGER.match(item.value.strip()):
            return int(item.value.strip())
        raise AttributeTypeMismatch(name, "integer", item.value)

    def as_address(self, name: str) -> Address:
        item = self[name]
        if item.tag is not ValueTag.ADDRESS:
            raise AttributeTypeMismatch(name, "address", item.value)
        return to_checksum_address(item.value)

    def as_boolean(self, name: str) -> bool:
        """Integer 1 is true, integer 0 is false, anything else is a mismatch."""
        item = self[name]
        if item.tag is not ValueTag.INTEGER or item.value not in (0, 1):
            raise AttributeTypeMismatch(name, "boolean", item.value)
        return item.value == 1

    def as_string(self, name: str) -> str:
        item = self[name]
        if item.tag is ValueTag.INTEGER:
            return str(item.value)
        return item.value

    def read(self, name: str, attribute_type: AttributeType) -> Any:
        """Dispatch to the getter for attribute_type."""
        getter = {
            AttributeType.STRING: self.as_string,
            AttributeType.INTEGER: self.as_integer,
            AttributeType.ADDRESS: self.as_address,
            AttributeType.BOOLEAN: self.as_boolean,
        }[attribute_type]
        return getter(name)


def from_attributes(attributes: Iterable[Union[Attribute, Mapping[str, Any]]]) -> AttributeAccessor:
    """
    Build an accessor from an attribute list.

    Args:
        attributes: Attribute models or raw {"trait_type", "value"} mappings

    Returns:
        AttributeAccessor keyed by trait name

    Raises:
        MalformedMetadata: If an entry has no trait name or an unsupported value
    """
    values: Dict[str, AttributeValue] = {}
    for attribute in attributes:
        if isinstance(attribute, Attribute):
            name, raw = attribute.trait_type, attribute.value
        else:
            try:
                name, raw = attribute["trait_type"], attribute["value"]
            except (KeyError, TypeError):
                raise MalformedMetadata(
                    f"Attribute entry is malformed: {attribute!r}", payload=attribute
                ) from None
        if not isinstance(name, str):
            raise MalformedMetadata(f"Attribute name must be a string: {name!r}", payload=attribute)

        if name in values:
            logger.debug(f"Ignoring duplicate attribute '{name}'")
            continue
        try:
            values[name] = AttributeValue.of(raw)
        except TypeError as e:
            raise MalformedMetadata(str(e), payload=attribute) from None
    return AttributeAccessor(values)
