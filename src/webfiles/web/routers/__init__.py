from webfiles.web.routers.files import router as files_router
from webfiles.web.routers.token import router as token_router

__all__ = [
    "files_router",
    "token_router",
]
