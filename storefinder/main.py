import logging

from fastapi import FastAPI
from storefinder.api.routes import stores
from storefinder.core.config import settings

logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(title="Storefinder API", version="0.1.0")

app.include_router(stores.router, prefix="/api/v1")


@app.get("/health")
def health_check():
    return {"status": "ok"}
