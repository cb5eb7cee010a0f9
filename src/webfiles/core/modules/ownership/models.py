from datetime import datetime

from pydantic import Field

from webfiles.core.db import MongoModel
from webfiles.utils import now


class OwnershipRecord(MongoModel):
    """Grant of access to a content uid for an identity.

    Unique on (identity, uid).
    """

    identity: str
    uid: str  # 16 lowercase hex digits
    created_at: datetime = Field(default_factory=now)
