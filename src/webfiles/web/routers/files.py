from fastapi import APIRouter, Request
from fastapi.responses import FileResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from webfiles.core.modules.content.models import UploadResponse
from webfiles.errors import MethodNotAllowedError, MissingFileError, UnsupportedMediaTypeError
from webfiles.web.deps import AppDep, AuthContextDep
from webfiles.web.openapi import ErrorResponse

router = APIRouter(tags=["files"])

UPLOAD_FIELD = "fileupload"


@router.post(
    "/upload",
    summary="Upload file",
    description=(
        f"Upload a file as multipart/form-data in the `{UPLOAD_FIELD}` field. "
        "The file is stored under the hash of its content and registered with the current identity. "
        "Returns the file's uid and the token needed to download it later."
    ),
    operation_id="uploadFile",
    responses={
        200: {"description": "File stored"},
        400: {"model": ErrorResponse, "description": "Missing file, malformed body, or invalid file name"},
        413: {"model": ErrorResponse, "description": "File too large"},
        415: {"model": ErrorResponse, "description": "Body is not multipart/form-data"},
    },
)
async def upload_file(request: Request, app: AppDep, auth: AuthContextDep) -> UploadResponse:
    media_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if media_type != "multipart/form-data":
        raise UnsupportedMediaTypeError(f"File upload Content-Type must be multipart/form-data, got '{media_type}'")

    try:
        form = await request.form()
    except StarletteHTTPException as e:
        raise MissingFileError(f"Invalid multipart body: {e.detail}") from e

    try:
        upload = form.get(UPLOAD_FIELD)
        if not isinstance(upload, UploadFile) or not upload.filename:
            raise MissingFileError(f"No file in form field '{UPLOAD_FIELD}'")
        return await app.upload_file(auth, upload.file, upload.filename)
    finally:
        await form.close()


@router.api_route("/upload", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def upload_wrong_method() -> None:
    raise MethodNotAllowedError("Upload must be POST")


@router.get(
    "/file/{fileid}",
    summary="Download file",
    description="Download a file by uid. Only identities that uploaded the file may download it.",
    operation_id="downloadFile",
    response_model=None,
    responses={
        200: {"description": "File content", "content": {"application/octet-stream": {}}},
        400: {"model": ErrorResponse, "description": "Stored file name is invalid"},
        401: {"model": ErrorResponse, "description": "Not authenticated or not an owner of the file"},
        404: {"model": ErrorResponse, "description": "File not found"},
    },
)
async def download_file(fileid: str, app: AppDep, auth: AuthContextDep) -> FileResponse:
    path = await app.get_file_path(auth, fileid)
    return FileResponse(path=path, media_type="application/octet-stream", filename=path.name)


@router.get(
    "/user-files",
    summary="List own files",
    description="Get uids of all files uploaded by the current identity.",
    operation_id="listUserFiles",
    responses={
        200: {"description": "List of uids"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_user_files(app: AppDep, auth: AuthContextDep) -> list[str]:
    return await app.list_user_files(auth)
