import logging
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Union

from fastapi import BackgroundTasks, FastAPI, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse

from .config import settings
from .errors import FrameError
from .logic import MultiAccountFrameLogic
from .schemas import (
    Asset,
    HealthResponse,
    ImageRequestedNotification,
    TotalAssetsResponse,
)

logger = logging.getLogger("photo_frame")
logging.basicConfig(level=settings.LOG_LEVEL)

STREAM_CHUNK_SIZE = 64 * 1024

app = FastAPI(title="Photo Frame")

_FRAME_LOGIC: Optional[MultiAccountFrameLogic] = None


def get_frame_logic() -> MultiAccountFrameLogic:
    global _FRAME_LOGIC
    if _FRAME_LOGIC is None:
        _FRAME_LOGIC = MultiAccountFrameLogic.from_settings(settings)
    return _FRAME_LOGIC


def _iter_stream(stream: BinaryIO) -> Iterator[bytes]:
    try:
        while chunk := stream.read(STREAM_CHUNK_SIZE):
            yield chunk
    finally:
        stream.close()


@app.on_event("startup")
def on_startup() -> None:
    logger.info(
        {
            "event": "boot",
            "service": settings.APP_NAME,
            "version": settings.VERSION,
            "accounts": len(settings.ACCOUNTS),
            "exhaustive_shuffle": settings.EXHAUSTIVE_SHUFFLE,
            "download_images": settings.DOWNLOAD_IMAGES,
        }
    )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    global _FRAME_LOGIC
    if _FRAME_LOGIC is not None:
        await _FRAME_LOGIC.aclose()
        _FRAME_LOGIC = None


@app.exception_handler(FrameError)
async def frame_error_handler(request: Request, exc: FrameError) -> JSONResponse:
    logger.warning({"event": "request.failed", "path": request.url.path, "error": exc.message})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    logger.debug({"event": "health.check"})
    return HealthResponse(ok=True, version=settings.VERSION, service=settings.APP_NAME)


@app.get("/api/asset/next", response_model=Asset)
async def next_asset() -> Union[Asset, JSONResponse]:
    asset = await get_frame_logic().get_next_asset()
    if asset is None:
        return JSONResponse(status_code=404, content={"error": "no_assets"})
    return asset


@app.get("/api/asset", response_model=List[Asset])
async def asset_batch() -> List[Asset]:
    return await get_frame_logic().get_assets()


@app.get("/api/asset/total", response_model=TotalAssetsResponse)
async def total_assets() -> TotalAssetsResponse:
    return TotalAssetsResponse(total=await get_frame_logic().get_total_assets())


@app.get("/api/asset/{asset_id}/image")
async def asset_image(
    asset_id: str,
    client_identifier: Optional[str] = Query(default=None, alias="clientIdentifier"),
) -> StreamingResponse:
    logic = get_frame_logic()
    filename, content_type, stream = await logic.get_image(asset_id)

    notify = BackgroundTasks()
    if client_identifier:
        notify.add_task(
            logic.send_webhook_notification,
            ImageRequestedNotification(
                client_identifier=client_identifier, requested_image_id=asset_id
            ),
        )

    return StreamingResponse(
        _iter_stream(stream),
        media_type=content_type or "application/octet-stream",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
        background=notify,
    )


@app.get("/api/asset/{asset_id}/info")
async def asset_info(asset_id: str) -> Dict[str, Any]:
    return await get_frame_logic().get_asset_info(asset_id)


@app.get("/api/asset/{asset_id}/albums")
async def asset_albums(asset_id: str) -> List[Dict[str, Any]]:
    return await get_frame_logic().get_album_info(asset_id)
