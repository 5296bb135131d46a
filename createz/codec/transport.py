"""
Resolution of metadata document references to parsed JSON.
"""

import base64
import binascii
import logging
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import unquote_to_bytes

import pydantic_core

from ..errors import MalformedMetadata

logger = logging.getLogger(__name__)


class MetadataTransport(ABC):
    """Turns a document reference into decoded JSON."""

    @abstractmethod
    async def resolve(self, uri: str) -> Any:
        """
        Resolve a document reference.

        Args:
            uri: Reference returned by contractURI() or tokenURI()

        Returns:
            Decoded JSON document

        Raises:
            MalformedMetadata: If the reference cannot be resolved to JSON
        """
        pass


class DataUriTransport(MetadataTransport):
    """
    Resolves inlined RFC 2397 data URIs.

    Subscription contracts render their metadata on-chain, so every
    document arrives as data:application/json[;base64],<payload>.
    """

    async def resolve(self, uri: str) -> Any:
        if not isinstance(uri, str) or not uri.startswith("data:"):
            raise MalformedMetadata(f"Unsupported metadata reference: {uri!r}", payload=uri)

        header, sep, payload = uri[len("data:"):].partition(",")
        if not sep:
            raise MalformedMetadata("Data URI has no payload separator", payload=uri)

        params = header.split(";")
        media_type = params[0] or "text/plain"
        if media_type != "application/json":
            logger.debug(f"Data URI declares {media_type}, decoding as JSON anyway")

        try:
            if "base64" in params[1:]:
                raw = base64.b64decode(payload, validate=True)
            else:
                raw = unquote_to_bytes(payload)
            return pydantic_core.from_json(raw)
        except (binascii.Error, ValueError) as e:
            raise MalformedMetadata(f"Data URI payload is not JSON: {e}", payload=uri) from e
