import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import CORS_ORIGINS, LOG_LEVEL
from database import Database
from errors import NotFound, StorageUnavailable, ValidationError
from routes.event_routes import router as event_router
from routes.habit_log_routes import router as habit_log_router
from routes.habit_routes import router as habit_router
from routes.overview_routes import router as overview_router
from routes.schedule_routes import router as schedule_router

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(database: Database | None = None) -> FastAPI:
    """Build the API around an explicitly owned Database handle."""
    database = database or Database()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.init()
        app.state.database = database
        try:
            yield
        finally:
            database.dispose()

    app = FastAPI(title="Habit & Schedule Tracker", lifespan=lifespan)

    @app.get("/api/v1/health-check")
    async def health():
        return {"status": "ok", "message": "Backend is alive!"}

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(StorageUnavailable)
    async def storage_handler(request: Request, exc: StorageUnavailable):
        logger.error(f"{request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"detail": "Storage unavailable, try again later"})

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(habit_log_router)
    app.include_router(habit_router)
    app.include_router(overview_router)
    app.include_router(event_router)
    app.include_router(schedule_router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
