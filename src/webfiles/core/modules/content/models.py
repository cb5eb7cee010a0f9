from pydantic import BaseModel, Field


class ContentRecord(BaseModel):
    """File stored under the hash of its content."""

    uid: str = Field(..., description="16 lowercase hex digits of the xxh64 content hash")
    original_name: str = Field(..., description="File name as supplied by the uploader")
    size_bytes: int = Field(..., description="Size of the content in bytes", ge=0)


class UploadedFile(BaseModel):
    """Uploaded file (API representation)."""

    uid: str = Field(..., description="Content identifier")
    file_name: str = Field(..., description="Original file name")
    file_size: int = Field(..., description="File size in bytes")

    @classmethod
    def from_domain(cls, record: ContentRecord) -> "UploadedFile":
        return cls(uid=record.uid, file_name=record.original_name, file_size=record.size_bytes)


class UploadResponse(BaseModel):
    """Upload result, including the token needed for later access."""

    file: UploadedFile
    token: str = Field(..., description="Token of the uploading identity")
