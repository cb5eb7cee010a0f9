from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast
from urllib.parse import urlparse

import structlog
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from structlog.typing import FilteringBoundLogger

from webfiles.config import Config


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]], logger: FilteringBoundLogger) -> None:
        self.database = database
        self.logger = logger.bind(service=type(self).__name__)
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    from webfiles.core.modules.access.service import AccessService  # noqa: PLC0415
    from webfiles.core.modules.auth.service import AuthService  # noqa: PLC0415
    from webfiles.core.modules.content.service import ContentService  # noqa: PLC0415
    from webfiles.core.modules.ownership.service import OwnershipService  # noqa: PLC0415
    from webfiles.core.modules.session.service import SessionService  # noqa: PLC0415

    session: SessionService
    auth: AuthService
    ownership: OwnershipService
    content: ContentService
    access: AccessService

    def __init__(self, database: AsyncDatabase[dict[str, Any]], logger: FilteringBoundLogger) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []
        self._database = database

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters for initialization - session must precede auth
        service_configs = [
            ("session", "webfiles.core.modules.session.service", "SessionService"),
            ("auth", "webfiles.core.modules.auth.service", "AuthService"),
            ("ownership", "webfiles.core.modules.ownership.service", "OwnershipService"),
            ("content", "webfiles.core.modules.content.service", "ContentService"),
            ("access", "webfiles.core.modules.access.service", "AccessService"),
        ]

        # Dynamically import and instantiate services
        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(database, logger)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        """Start all services that have startup logic."""
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        """Stop all services that have cleanup logic."""
        for service in self._services:
            await service.on_stop()


class Core:
    """Container providing config, database, logger, and all service instances."""

    config: Config
    logger: FilteringBoundLogger
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    services: Services

    def __init__(
        self,
        config: Config,
        mongo_client: AsyncMongoClient[dict[str, Any]] | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize core with config, MongoDB, logger, and auto-register services."""
        self.config = config
        self.logger = logger if logger is not None else structlog.get_logger("webfiles")
        if mongo_client is None:
            mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard")
        self.mongo_client = mongo_client
        self.database = self.mongo_client.get_database(urlparse(config.database_url).path[1:] or "webfiles")
        self.services = Services(self.database, self.logger)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Start all services on application startup."""
        await self.services.start_all()
        self.logger.info("webfiles_started", files_path=self.config.files_path)

    async def on_stop(self) -> None:
        """Stop services and close MongoDB connection on shutdown."""
        await self.services.stop_all()
        await self.mongo_client.aclose()
