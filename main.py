"""
Main FastAPI application entry point
"""
import multiprocessing
import uvicorn
from app.core.app import create_app
from app.core.config import get_settings

settings = get_settings()
app = create_app()


def worker_count() -> int:
    """Configured workers, or two per CPU core plus one"""
    return settings.UVICORN_WORKERS or (multiprocessing.cpu_count() * 2) + 1


if __name__ == "__main__":
    if settings.DEBUG:
        # Development: single worker with hot reload
        uvicorn.run(
            "main:app",
            host=settings.HOST,
            port=settings.PORT,
            reload=True,
            log_level=settings.LOG_LEVEL.lower()
        )
    else:
        # Production: each worker process builds its own services and bus
        uvicorn.run(
            "main:app",
            host=settings.HOST,
            port=settings.PORT,
            workers=worker_count(),
            reload=False,
            log_level=settings.LOG_LEVEL.lower()
        )
