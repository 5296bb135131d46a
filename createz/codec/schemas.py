"""
Metadata document schemas.

The same field definitions validate inbound documents returned by
contractURI()/tokenURI() and outbound values sent with metadata update calls.
"""

from typing import Annotated, List, Optional, Union

from pydantic import (
    AnyUrl,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
)

_URL = TypeAdapter(AnyUrl)


def _strip(value):
    if isinstance(value, str):
        return value.strip()
    return value


def _url_or_empty(message: str):
    def _validate(value):
        value = _strip(value)
        # "" clears the field, same meaning as absent
        if value is None or value == "":
            return value
        if not isinstance(value, str):
            raise ValueError(message)
        try:
            _URL.validate_python(value)
        except ValidationError:
            raise ValueError(message)
        return value

    return _validate


Name = Annotated[StrictStr, BeforeValidator(_strip), Field(min_length=3)]
Description = Optional[StrictStr]
ImageUrl = Annotated[Optional[str], BeforeValidator(_url_or_empty("Image must be a URL"))]
ExternalUrl = Annotated[
    Optional[str], BeforeValidator(_url_or_empty("External link must be a URL"))
]


class Attribute(BaseModel):
    """One trait_type/value pair of an attribute list."""

    model_config = ConfigDict(frozen=True)

    trait_type: StrictStr
    value: Union[StrictInt, StrictStr]


class MetadataDocument(BaseModel):
    """Metadata document embedded in a subscription contract or token."""

    model_config = ConfigDict(frozen=True)

    name: Name
    description: Description = None
    image: ImageUrl = None
    external_url: ExternalUrl = None
    attributes: List[Attribute]


# Per-field validators for metadata update calls
FIELD_ADAPTERS = {
    "name": TypeAdapter(Name),
    "description": TypeAdapter(Description),
    "image": TypeAdapter(ImageUrl),
    "external_url": TypeAdapter(ExternalUrl),
}
