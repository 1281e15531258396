"""User data models."""

from datetime import datetime

from pydantic import BaseModel, Field

from sheepit.core.secrets import EncryptedSecret
from sheepit.utils.ids import generate_id


class User(BaseModel):
    """A user with sealed provider credentials."""

    id: str = Field(default_factory=generate_id)
    github_id: str
    username: str
    email: str | None = None
    avatar_url: str | None = None

    github_token: EncryptedSecret
    vercel_token: EncryptedSecret | None = None
    cloudflare_token: EncryptedSecret | None = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class UserCreate(BaseModel):
    """Register a user from a GitHub access token."""

    github_token: str = Field(..., min_length=1)


class TokenSubmit(BaseModel):
    """A provider token submitted by the user."""

    token: str = ""


class UserResponse(BaseModel):
    """Public view of a user."""

    id: str
    username: str
    avatar_url: str | None = None
    vercel_connected: bool = False
    cloudflare_connected: bool = False

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            avatar_url=user.avatar_url,
            vercel_connected=user.vercel_token is not None,
            cloudflare_connected=user.cloudflare_token is not None,
        )
