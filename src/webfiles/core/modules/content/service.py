import asyncio
from pathlib import Path
from typing import BinaryIO

from webfiles.core.core import Service
from webfiles.core.modules.content.models import ContentRecord
from webfiles.core.modules.content.storage import resolve_content, write_content


class ContentService(Service):
    """Content-addressed file storage on the local filesystem."""

    @property
    def root(self) -> Path:
        return Path(self.core.config.files_path).absolute()

    async def on_start(self) -> None:
        """Create the storage root."""
        self.root.mkdir(parents=True, exist_ok=True)

    async def store_upload(self, stream: BinaryIO, filename: str) -> ContentRecord:
        """Hash and store an upload, returning its content record.

        Args:
            stream: Readable binary stream positioned at the start of the upload
            filename: File name as supplied by the client

        Raises:
            PathEscapeError: If filename would be stored outside the storage root
            ValidationError: If filename is reserved
            FileTooLargeError: If the upload exceeds the configured limit
        """
        record = await asyncio.to_thread(write_content, self.root, stream, filename, self.core.config.max_file_size)
        self.logger.info("content_stored", uid=record.uid, file_name=record.original_name, size=record.size_bytes)
        return record

    def resolve(self, uid: str) -> Path:
        """Get the absolute path of the file stored under uid.

        Raises:
            NotFoundError: If nothing is stored under uid
            PathEscapeError: If the stored name resolves outside its directory
        """
        return resolve_content(self.root, uid)
