"""File ingestion data models."""

import base64
import binascii

from pydantic import BaseModel, Field, field_validator


class FileEntry(BaseModel):
    """A project file destined for the repository push."""

    path: str = Field(..., min_length=1)
    content: str  # base64

    @field_validator("content")
    @classmethod
    def _check_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"content is not valid base64: {e}") from e
        return value

    def decode(self) -> bytes:
        return base64.b64decode(self.content)


class EnvFileEntry(BaseModel):
    """An environment file, kept apart from the pushed files."""

    path: str
    content: str  # raw text


class EnvVar(BaseModel):
    """A single environment variable."""

    key: str = Field(..., min_length=1)
    value: str = ""
