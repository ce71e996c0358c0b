from fastapi import Depends, Request

from app.capture import CaptureService


def get_settings(request: Request):
    return request.app.state.settings


def get_gateway(request: Request):
    return request.app.state.gateway


def get_uploader(request: Request):
    return request.app.state.uploader


def get_store(request: Request):
    return request.app.state.store


def get_capture_service(
    request: Request,
    gateway=Depends(get_gateway),
    uploader=Depends(get_uploader),
    store=Depends(get_store),
    settings=Depends(get_settings),
) -> CaptureService:
    return CaptureService(
        gateway,
        uploader,
        store,
        dedupe=settings.capture_dedup,
        locks=request.app.state.payment_locks,
    )
