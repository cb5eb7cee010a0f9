"""File storage operations for the content-addressed store.

Layout: `{root}/{uid}/{basename}` holds the payload and `{root}/{uid}/NAME` the
verbatim original file name. NAME is written last, so a uid directory without
it is treated as absent.
"""

import os
import tempfile
from pathlib import Path
from typing import BinaryIO

import xxhash

from webfiles.core.modules.content.models import ContentRecord
from webfiles.errors import FileTooLargeError, NotFoundError, PathEscapeError, ValidationError
from webfiles.utils import is_uid

NAME_FILE = "NAME"
TEMP_PREFIX = ".incoming-"
CHUNK_SIZE = 64 * 1024


def is_descendant(directory: Path, path: Path) -> bool:
    """Whether path resolves strictly inside directory."""
    resolved_dir = directory.resolve()
    resolved = path.resolve()
    return resolved != resolved_dir and resolved.is_relative_to(resolved_dir)


def base_name(filename: str) -> str:
    """Last component of a client file name, treating both slash styles as separators."""
    return filename.replace("\\", "/").rsplit("/", 1)[-1]


def storage_name(filename: str) -> str:
    """Name under which an upload is stored.

    Args:
        filename: File name as supplied by the client

    Returns:
        The base name of filename

    Raises:
        PathEscapeError: If filename has `..` components or no usable base name
        ValidationError: If the base name is reserved by the store
    """
    if ".." in filename.replace("\\", "/").split("/"):
        raise PathEscapeError(f"File name may not contain '..' components: {filename!r}")

    name = base_name(filename)
    if name in ("", "."):
        raise PathEscapeError(f"File name has no base name: {filename!r}")
    if "\x00" in name:
        raise ValidationError("File name may not contain NUL characters")
    if name == NAME_FILE or name.startswith(TEMP_PREFIX):
        raise ValidationError(f"Reserved file name: {name}")
    return name


def content_dir(root: Path, uid: str) -> Path:
    return root / uid


def read_record(root: Path, uid: str) -> ContentRecord | None:
    """Record of a completely stored uid, or None if it is absent or partial."""
    directory = content_dir(root, uid)
    try:
        original_name = (directory / NAME_FILE).read_bytes().decode("utf-8")
    except (FileNotFoundError, NotADirectoryError, UnicodeDecodeError):
        return None

    payload = directory / base_name(original_name)
    if not original_name or not is_descendant(directory, payload) or not payload.is_file():
        return None
    return ContentRecord(uid=uid, original_name=original_name, size_bytes=payload.stat().st_size)


def write_content(root: Path, stream: BinaryIO, filename: str, max_size: int) -> ContentRecord:
    """Store an upload under the hash of its content.

    The stream is hashed and written to a temporary file in one pass, then
    moved into place. If the same content is already stored, the temporary
    file is discarded and the existing record returned.

    Args:
        root: Storage root
        stream: Readable binary stream of the upload
        filename: File name as supplied by the client
        max_size: Largest accepted size in bytes

    Returns:
        Record of the stored content

    Raises:
        PathEscapeError: If filename would resolve outside its content directory
        ValidationError: If filename is reserved
        FileTooLargeError: If the upload exceeds max_size
    """
    name = storage_name(filename)
    root.mkdir(parents=True, exist_ok=True)

    hasher = xxhash.xxh64()
    size = 0
    fd, temp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=root)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as temp_file:
            while chunk := stream.read(CHUNK_SIZE):
                size += len(chunk)
                if size > max_size:
                    raise FileTooLargeError(f"File exceeds the maximum size of {max_size} bytes")
                hasher.update(chunk)
                temp_file.write(chunk)

        uid = hasher.hexdigest()
        directory = content_dir(root, uid)
        target = directory / name
        if not is_descendant(directory, target):
            raise PathEscapeError(f"File name resolves outside the storage root: {filename!r}")

        existing = read_record(root, uid)
        if existing is not None:
            return existing

        directory.mkdir(exist_ok=True)
        os.replace(temp_path, target)
        _write_name_file(directory, filename)
        return ContentRecord(uid=uid, original_name=filename, size_bytes=size)
    finally:
        temp_path.unlink(missing_ok=True)


def resolve_content(root: Path, uid: str) -> Path:
    """Get absolute path to the stored file of a uid.

    Raises:
        NotFoundError: If the uid is malformed, or its directory, NAME sidecar or payload is missing
        PathEscapeError: If the recorded name resolves outside the uid directory
    """
    if not is_uid(uid):
        raise NotFoundError(f"File not found: {uid}")

    directory = content_dir(root, uid)
    try:
        original_name = (directory / NAME_FILE).read_bytes().decode("utf-8")
    except (FileNotFoundError, NotADirectoryError) as e:
        raise NotFoundError(f"File not found: {uid}") from e
    except UnicodeDecodeError as e:
        raise ValidationError(f"Unreadable file name for {uid}") from e
    if not original_name:
        raise NotFoundError(f"File not found: {uid}")

    path = directory / base_name(original_name)
    if not is_descendant(directory, path):
        raise PathEscapeError
    if not path.is_file():
        raise NotFoundError(f"File not found: {uid}")
    return path.resolve()


def _write_name_file(directory: Path, filename: str) -> None:
    fd, temp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=directory)
    try:
        with os.fdopen(fd, "wb") as name_file:
            name_file.write(filename.encode("utf-8"))
        os.replace(temp_name, directory / NAME_FILE)
    finally:
        Path(temp_name).unlink(missing_ok=True)
