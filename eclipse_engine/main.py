import logging

from fastapi import FastAPI

from eclipse_engine.config import settings
from eclipse_engine.routers import combat, matches, turns

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Eclipse Rules Engine",
    description="Turn order, phase cycle and resource economy for Eclipse matches",
    version="0.1.0",
)

app.include_router(matches.router)
app.include_router(turns.router)
app.include_router(combat.router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
