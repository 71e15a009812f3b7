from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])


@router.get("/healthcheck", response_class=PlainTextResponse, summary="Liveness check")
async def healthcheck() -> str:
    return "i am alive"
