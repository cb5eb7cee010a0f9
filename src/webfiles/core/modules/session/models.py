"""Session management models."""

from datetime import datetime

from pydantic import Field

from webfiles.core.db import MongoModel
from webfiles.utils import now

SESSION_TOKEN_KEY = "JWTToken"


class Session(MongoModel):
    """Cookie-addressed server-side session.

    Stored with its value bag encrypted; indexed on updated_at (TTL).
    """

    values: dict[str, str] = Field(default_factory=dict)
    is_new: bool = False
    created_at: datetime = Field(default_factory=now)

    @property
    def cached_token(self) -> str | None:
        """Token remembered by this session, if any."""
        return self.values.get(SESSION_TOKEN_KEY)

    def cache_token(self, token: str) -> None:
        self.values[SESSION_TOKEN_KEY] = token
