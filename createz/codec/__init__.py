"""
Attribute codec for on-chain metadata documents.
"""

from .attributes import (
    AttributeAccessor,
    AttributeType,
    AttributeValue,
    ValueTag,
    from_attributes,
)
from .codec import MetadataRecord, decode, encode, parse_document, validate_metadata_update
from .schemas import Attribute, MetadataDocument
from .transport import DataUriTransport, MetadataTransport

__all__ = [
    "Attribute",
    "AttributeAccessor",
    "AttributeType",
    "AttributeValue",
    "DataUriTransport",
    "MetadataDocument",
    "MetadataRecord",
    "MetadataTransport",
    "ValueTag",
    "decode",
    "encode",
    "from_attributes",
    "parse_document",
    "validate_metadata_update",
]
