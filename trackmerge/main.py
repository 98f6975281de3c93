from fastapi import FastAPI

from trackmerge import __version__
from trackmerge.api.activities import router as activities_router
from trackmerge.config.settings import settings
from trackmerge.core.logger import setup_logger

setup_logger(settings)

app = FastAPI(title="Trackmerge", version=__version__)
app.include_router(activities_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
