"""FastAPI application for benefit-insights.

Run with: uvicorn benefit_insights.server:app --host 127.0.0.1 --port 8395 --reload
Or: benefit-insights start
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from benefit_insights.config import get_store_kind
from benefit_insights.routes import chat, health, insights, profile, quiz, report
from benefit_insights.storage.filesystem import ensure_directories

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Benefit-Insights",
    description="Benefits questionnaire and personalized insight engine",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8395",
        "http://127.0.0.1",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8395",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(profile.router)
app.include_router(quiz.router)
app.include_router(insights.router)
app.include_router(chat.router)
app.include_router(report.router)


@app.on_event("startup")
async def on_startup():
    if get_store_kind() == "file":
        ensure_directories()
    logger.info("Benefit-Insights server started.")
