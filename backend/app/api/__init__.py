from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from app.errors import AppServiceError
from app.services import AppService, get_app_service

router = APIRouter(tags=["app"])


@router.get("/", response_class=PlainTextResponse)
def get_hello(service: AppService = Depends(get_app_service)) -> str:
    return service.get_hello()


@router.get("/healthz")
def healthz(service: AppService = Depends(get_app_service)) -> dict[str, str]:
    try:
        return service.health()
    except AppServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
