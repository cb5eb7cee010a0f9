from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from webfiles.web.deps import AuthContextDep

router = APIRouter(tags=["token"])


@router.get(
    "/token",
    summary="Get current token",
    description=(
        "Return the token of the current session as plain text. "
        "A token is minted on first contact, so this also works for new clients."
    ),
    operation_id="getToken",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Signed token", "content": {"text/plain": {}}},
        500: {"description": "Token not available"},
    },
)
async def get_token(auth: AuthContextDep) -> PlainTextResponse:
    if not auth.raw_token:
        return PlainTextResponse("JWT not available", status_code=500)
    return PlainTextResponse(auth.raw_token)
