# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Material request and response models.

Materials only reference files held in external object storage. URLs are
validated as http(s) but stored exactly as submitted.
"""

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
)

_http_url = TypeAdapter(HttpUrl)


def _check_url(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("Invalid URL format") from None
    return value


class MaterialCreateRequest(BaseModel):
    lesson_id: str = Field(min_length=1)
    filename: str = Field(min_length=1, max_length=255)
    url: str = Field(description="Storage URL of the file")

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        return _check_url(value)


class MaterialPatch(BaseModel):
    """Partial update of a material."""

    filename: str | None = Field(default=None, min_length=1, max_length=255)
    url: str | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str | None) -> str | None:
        return _check_url(value)


class MaterialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    filename: str
    url: str
    lesson_id: str
