import base64
import hashlib
import json
from typing import Any
from uuid import UUID

from cryptography.fernet import Fernet, InvalidToken
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError
from structlog.typing import FilteringBoundLogger

from webfiles.core.core import Service
from webfiles.core.modules.session.models import Session
from webfiles.errors import SessionStoreError
from webfiles.utils import now


def derive_session_key(secret: str) -> bytes:
    """Derive the Fernet key for cookies and stored values from the shared secret."""
    return base64.urlsafe_b64encode(hashlib.sha256(secret.encode("utf-8")).digest())


class SessionService(Service):
    """Persistent cookie sessions with values encrypted at rest."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]], logger: FilteringBoundLogger) -> None:
        super().__init__(database, logger)
        self._collection = database.get_collection("sessions")
        self._fernet: Fernet | None = None

    async def on_start(self) -> None:
        """Create indexes on startup."""
        # TTL index for automatic session cleanup
        await self._collection.create_index([("updated_at", 1)], expireAfterSeconds=self.core.config.session_max_age)

    @property
    def fernet(self) -> Fernet:
        if self._fernet is None:
            self._fernet = Fernet(derive_session_key(self.core.config.signing_key))
        return self._fernet

    def new_session(self) -> Session:
        """Create an unsaved session with a freshly allocated id."""
        return Session(is_new=True)

    async def get_session(self, cookie_value: str | None) -> Session:
        """Load the session addressed by a cookie value, or start a new one.

        A missing or undecryptable cookie, or a session record that no longer
        exists, yields a new session.

        Raises:
            SessionStoreError: If the session store cannot be read
        """
        if not cookie_value:
            return self.new_session()

        session_id = self.decode_cookie(cookie_value)
        if session_id is None:
            self.logger.info("session_cookie_rejected")
            return self.new_session()

        try:
            doc = await self._collection.find_one({"_id": session_id})
        except PyMongoError as e:
            self.logger.error("session_load_failed", session_id=str(session_id), error=str(e))
            raise SessionStoreError(f"Failed to load session: {e}") from e

        if doc is None:
            self.logger.info("session_not_found", session_id=str(session_id))
            return self.new_session()

        try:
            values = self._decrypt_values(doc["data"])
        except (InvalidToken, KeyError, ValueError):
            self.logger.warning("session_values_unreadable", session_id=str(session_id))
            return self.new_session()

        return Session(id=session_id, values=values, created_at=doc.get("created_at", now()))

    async def save_session(self, session: Session) -> str:
        """Persist the session and return the cookie value that addresses it.

        Raises:
            SessionStoreError: If the session store cannot be written
        """
        try:
            await self._collection.update_one(
                {"_id": session.id},
                {
                    "$set": {"data": self._encrypt_values(session.values), "updated_at": now()},
                    "$setOnInsert": {"created_at": session.created_at},
                },
                upsert=True,
            )
        except PyMongoError as e:
            self.logger.error("session_save_failed", session_id=str(session.id), error=str(e))
            raise SessionStoreError(f"Failed to save session: {e}") from e

        if session.is_new:
            self.logger.debug("session_created", session_id=str(session.id))
        return self.encode_cookie(session.id)

    def encode_cookie(self, session_id: UUID) -> str:
        return self.fernet.encrypt(str(session_id).encode("ascii")).decode("ascii")

    def decode_cookie(self, cookie_value: str) -> UUID | None:
        """Decrypt a session cookie to its session id, None if invalid or expired."""
        try:
            raw = self.fernet.decrypt(cookie_value.encode("ascii"), ttl=self.core.config.session_max_age)
            return UUID(raw.decode("ascii"))
        except (InvalidToken, UnicodeError, ValueError):
            return None

    def _encrypt_values(self, values: dict[str, str]) -> str:
        return self.fernet.encrypt(json.dumps(values).encode("utf-8")).decode("ascii")

    def _decrypt_values(self, data: str) -> dict[str, str]:
        values = json.loads(self.fernet.decrypt(data.encode("ascii")))
        if not isinstance(values, dict):
            raise ValueError("Session values must be a mapping")
        return {str(k): str(v) for k, v in values.items()}
