"""Hero preview endpoints."""

from __future__ import annotations

from io import BytesIO

from fastapi import APIRouter, HTTPException, Query, Request, Response

from ..hero import CinematicHero

router = APIRouter(tags=["hero"])


def _get_hero(request: Request) -> CinematicHero:
    return request.app.state.hero


def _state_payload(hero: CinematicHero) -> dict:
    slide = hero.active_slide
    load = hero.load_state
    return {
        "display": hero.display_state.value,
        "state": hero.state.value,
        "index": hero.current_index,
        "slide_count": len(hero.slides),
        "slide": slide.to_dict() if slide is not None else None,
        "progress": hero.progress,
        "frame_index": hero.frame_index,
        "canvas": {"width": hero.canvas.width, "height": hero.canvas.height},
        "load": None
        if load is None
        else {
            "mode": load.mode.value,
            "frame_count": load.frame_count,
            "loaded": load.loaded_count,
            "failed": load.failed_count,
            "pending": load.pending_count,
            "is_complete": load.is_complete,
            "timed_out": load.timed_out,
            "all_failed": load.all_failed,
        },
    }


def _require_slides(hero: CinematicHero) -> None:
    if not hero.slides:
        raise HTTPException(status_code=409, detail="No active hero slides")


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/slides")
async def list_slides(request: Request):
    """List the active slides in display order."""
    hero = _get_hero(request)
    return [slide.to_dict() for slide in hero.slides]


@router.get("/hero/state")
async def get_state(request: Request):
    """Active slide, render state and load counters."""
    return _state_payload(_get_hero(request))


@router.post("/hero/next")
async def next_slide(request: Request):
    hero = _get_hero(request)
    _require_slides(hero)
    hero.next()
    return _state_payload(hero)


@router.post("/hero/previous")
async def previous_slide(request: Request):
    hero = _get_hero(request)
    _require_slides(hero)
    hero.previous()
    return _state_payload(hero)


@router.post("/hero/slide/{index}")
async def go_to_slide(request: Request, index: int):
    hero = _get_hero(request)
    _require_slides(hero)
    try:
        hero.go_to(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _state_payload(hero)


@router.get("/hero/frame.png")
async def render_frame(
    request: Request,
    progress: float = Query(default=0.0, ge=0.0, le=1.0),
    width: int | None = Query(default=None, ge=1, le=7680),
    height: int | None = Query(default=None, ge=1, le=4320),
    wait: bool = Query(default=False, description="Wait until the slide finished loading"),
):
    """Render the hero for a scroll progress value as PNG.

    Examples:
        /hero/frame.png?progress=0.5
        /hero/frame.png?progress=1&width=1920&height=1080&wait=true
    """
    hero = _get_hero(request)
    _require_slides(hero)
    if wait:
        await hero.wait_until_loaded()
    if width is not None or height is not None:
        new_size = (width or hero.canvas.width, height or hero.canvas.height)
        if new_size != hero.canvas.size:
            hero.on_resize(*new_size)
    hero.on_progress(progress)
    image = hero.compose()
    output = BytesIO()
    image.save(output, format="PNG")
    return Response(
        content=output.getvalue(),
        media_type="image/png",
        headers={
            "X-Hero-State": hero.state.value,
            "X-Frame-Index": str(hero.frame_index),
        },
    )
