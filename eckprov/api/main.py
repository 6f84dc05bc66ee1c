import logging
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException

from eckprov import __version__
from eckprov.api.dependencies import configure_provider, init_provider_state
from eckprov.api.middleware import AuthMiddleware
from eckprov.api.routes import clusters, controlplanes
from eckprov.logging import setup_logger

load_dotenv()
setup_logger("eckprov")

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        configure_provider(app.state)
    except HTTPException as e:
        logger.warning("ECK provider not configured at startup, retrying on first request: %s", e.detail)
    yield
    app.state.provider = None


app = FastAPI(title="eckprov", version=__version__, lifespan=lifespan)
init_provider_state(app)
app.add_middleware(AuthMiddleware)

app.include_router(controlplanes.router)
app.include_router(clusters.router)


@app.get("/healthz")
def healthz():
    return {"status": "ok", "version": __version__}


def run(host: str = "127.0.0.1", port: int = 8000):
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
