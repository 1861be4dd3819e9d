"""FastAPI application exposing the motion engines."""
from __future__ import annotations

from fastapi import FastAPI

from motion_engines.motion_graphics.routes import router as motion_router
from motion_engines.video_timeline.routes import router as clips_router


def create_app() -> FastAPI:
    app = FastAPI(title="Motion Engines")
    app.include_router(motion_router)
    app.include_router(clips_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
