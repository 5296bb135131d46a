"""
Decoding of metadata documents into typed records and the reverse.

A record type is a frozen dataclass deriving from MetadataRecord that lists
its attribute-backed fields in ATTRIBUTES as field -> (trait name, type).
"""

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Tuple, Type, TypeVar, Union

import pydantic_core
from pydantic import ValidationError

from ..errors import (
    AttributeNotFound,
    AttributeTypeMismatch,
    InvalidParameter,
    MalformedMetadata,
)
from ..types import normalize_address
from .attributes import AttributeType, from_attributes
from .schemas import FIELD_ADAPTERS, MetadataDocument

logger = logging.getLogger(__name__)

R = TypeVar("R", bound="MetadataRecord")


@dataclass(frozen=True, kw_only=True)
class MetadataRecord:
    """Display metadata shared by every decoded record."""

    ATTRIBUTES: ClassVar[Dict[str, Tuple[str, AttributeType]]] = {}

    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    external_url: Optional[str] = None


def _not_set(value: Optional[str]) -> Optional[str]:
    return value or None


def parse_document(raw_document: Union[dict, str, bytes]) -> MetadataDocument:
    """
    Validate a raw metadata document.

    Raises:
        MalformedMetadata: If the document is not JSON or violates the schema
    """
    try:
        if isinstance(raw_document, (str, bytes, bytearray)):
            raw_document = pydantic_core.from_json(raw_document)
        return MetadataDocument.model_validate(raw_document)
    except ValidationError as e:
        raise MalformedMetadata(
            f"Metadata failed validation: {e.error_count()} error(s): {e.errors(include_url=False)}",
            payload=raw_document,
        ) from e
    except ValueError as e:
        raise MalformedMetadata(f"Metadata is not valid JSON: {e}", payload=raw_document) from e


def decode(raw_document: Union[dict, str, bytes], schema: Type[R], **context: Any) -> R:
    """
    Decode a metadata document into a typed record.

    Args:
        raw_document: Parsed JSON or JSON text
        schema: MetadataRecord subclass to project into
        **context: Fields that do not come from the document (address, token id)

    Returns:
        New schema instance

    Raises:
        MalformedMetadata: If the document or a required attribute is invalid
    """
    document = parse_document(raw_document)
    accessor = from_attributes(document.attributes)

    values = {}
    for field_name, (trait, attribute_type) in schema.ATTRIBUTES.items():
        try:
            values[field_name] = accessor.read(trait, attribute_type)
        except (AttributeNotFound, AttributeTypeMismatch) as e:
            raise MalformedMetadata(
                f"Invalid {schema.__name__} metadata: {e}", payload=raw_document
            ) from e

    return schema(
        name=document.name,
        description=_not_set(document.description),
        image=_not_set(document.image),
        external_url=_not_set(document.external_url),
        **values,
        **context,
    )


def _encode_value(value: Any, attribute_type: AttributeType) -> Union[int, str]:
    if attribute_type is AttributeType.BOOLEAN:
        return 1 if value else 0
    if attribute_type is AttributeType.ADDRESS:
        return normalize_address(value)
    if attribute_type is AttributeType.INTEGER:
        return int(value)
    return str(value)


def encode(record: MetadataRecord) -> Dict[str, Any]:
    """
    Encode a record back into a metadata document.

    Unset display fields are omitted. The result is validated against the
    document schema before it is returned.

    Raises:
        MalformedMetadata: If the record does not produce a valid document
    """
    document: Dict[str, Any] = {"name": record.name}
    for field_name in ("description", "image", "external_url"):
        value = getattr(record, field_name)
        if value:
            document[field_name] = value

    document["attributes"] = [
        {"trait_type": trait, "value": _encode_value(getattr(record, field_name), attribute_type)}
        for field_name, (trait, attribute_type) in type(record).ATTRIBUTES.items()
    ]
    parse_document(document)
    return document


def validate_metadata_update(field_name: str, value: Optional[str]) -> str:
    """
    Validate a display value before it is sent with an update call.

    Args:
        field_name: One of name, description, image, external_url
        value: New value; None and "" both clear optional fields

    Returns:
        Value to submit, "" for cleared fields

    Raises:
        InvalidParameter: For unknown fields
        MalformedMetadata: If the value violates the field schema
    """
    adapter = FIELD_ADAPTERS.get(field_name)
    if adapter is None:
        raise InvalidParameter(f"Unknown metadata field: {field_name}")
    try:
        validated = adapter.validate_python(value)
    except ValidationError as e:
        messages = "; ".join(error["msg"] for error in e.errors())
        raise MalformedMetadata(f"Invalid {field_name}: {messages}", payload=value) from e
    return validated or ""
