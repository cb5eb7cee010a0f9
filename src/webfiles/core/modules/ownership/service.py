from typing import Any

from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError
from structlog.typing import FilteringBoundLogger

from webfiles.core.core import Service
from webfiles.core.modules.ownership.models import OwnershipRecord


class OwnershipService(Service):
    """Index of which identities own which content uids."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]], logger: FilteringBoundLogger) -> None:
        super().__init__(database, logger)
        self._collection = database.get_collection("user_files")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        # Unique compound index turns concurrent duplicate inserts into no-ops
        await self._collection.create_index([("identity", 1), ("uid", 1)], unique=True)
        await self._collection.create_index([("identity", 1), ("created_at", 1)])

    async def record(self, identity: str, uid: str) -> bool:
        """Record that identity owns uid. Returns False if it already did."""
        if await self.is_owned_by(identity, uid):
            self.logger.debug("ownership_exists", identity=identity, uid=uid)
            return False

        try:
            await self._collection.insert_one(OwnershipRecord(identity=identity, uid=uid).to_mongo())
        except DuplicateKeyError:
            self.logger.debug("ownership_inserted_concurrently", identity=identity, uid=uid)
            return False

        self.logger.info("ownership_recorded", identity=identity, uid=uid)
        return True

    async def list_by_identity(self, identity: str) -> list[str]:
        """Get all uids recorded for identity, oldest first."""
        cursor = self._collection.find({"identity": identity}).sort("created_at", 1)
        records = await OwnershipRecord.list_cursor(cursor)
        return list(dict.fromkeys(record.uid for record in records))

    async def is_owned_by(self, identity: str, uid: str) -> bool:
        """Check if identity owns uid."""
        return await self._collection.find_one({"identity": identity, "uid": uid}) is not None
