from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, BinaryIO

from pymongo import AsyncMongoClient
from structlog.typing import FilteringBoundLogger

from webfiles.config import Config
from webfiles.core.core import Core
from webfiles.core.modules.auth.models import AuthContext, TokenRequest, TokenResolution
from webfiles.core.modules.content.models import UploadedFile, UploadResponse
from webfiles.errors import AuthenticationError


class App:
    """Facade for all application operations, validates permissions before delegating to Core."""

    def __init__(
        self,
        config: Config,
        mongo_client: AsyncMongoClient[dict[str, Any]] | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._core = Core(config, mongo_client=mongo_client, logger=logger)

    @property
    def config(self) -> Config:
        return self._core.config

    @property
    def logger(self) -> FilteringBoundLogger:
        return self._core.logger

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def resolve_token(self, request: TokenRequest) -> TokenResolution:
        """Determine the authoritative token and identity of a request."""
        return await self._core.services.auth.resolve(request)

    async def upload_file(self, context: AuthContext, stream: BinaryIO, filename: str) -> UploadResponse:
        """Store an upload and register it with the uploading identity."""
        identity = self._core.services.access.ensure_authenticated(context)
        if context.session is None or not context.raw_token:
            raise AuthenticationError("Token not available")

        record = await self._core.services.content.store_upload(stream, filename)
        await self._core.services.ownership.record(identity, record.uid)
        return UploadResponse(file=UploadedFile.from_domain(record), token=context.raw_token)

    async def get_file_path(self, context: AuthContext, uid: str) -> Path:
        """Get path of a stored file (owner only)."""
        authorized = await self._core.services.access.ensure_file_owner(context, uid)
        if not authorized.authorized:
            raise AuthenticationError(f"Unauthorized for file {uid}")
        return self._core.services.content.resolve(uid)

    async def list_user_files(self, context: AuthContext) -> list[str]:
        """Get uids of all files owned by the current identity."""
        identity = self._core.services.access.ensure_authenticated(context)
        return await self._core.services.ownership.list_by_identity(identity)
