"""Run the FastAPI server."""

import uvicorn

from settings import settings

if __name__ == "__main__":
    # A single worker: in-flight sends are tracked per process
    uvicorn.run(
        "api.main:app",
        host=settings.host,
        port=settings.port,
        workers=1,
    )
