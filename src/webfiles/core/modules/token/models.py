"""Token claim models."""

from datetime import datetime
from typing import NewType

from pydantic import BaseModel, ConfigDict

SignedToken = NewType("SignedToken", str)


class TokenClaims(BaseModel):
    """Verified claim set of a signed token."""

    subject: str
    issued_at: datetime
    expires_at: datetime

    model_config = ConfigDict(frozen=True)
