import logging

from fastapi import FastAPI

from app.api.v1.router import api_router
from app.core.config import get_log_level


logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title="Sales Analytics")
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def root():
    return {"status": "ok", "message": "Sales analytics backend running"}
