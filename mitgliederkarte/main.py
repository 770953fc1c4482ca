"""Mitgliederkarte — FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mitgliederkarte.api.routes import router
from mitgliederkarte.models import DatasetLoadError, MalformedFeatureError
from mitgliederkarte.storage.memory import get_dataset

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Loading boundaries and membership records ...")
    try:
        get_dataset()
    except (DatasetLoadError, MalformedFeatureError):
        logger.exception("Dataset could not be loaded, API will answer 503")
    logger.info("Mitgliederkarte API is ready.")
    yield
    logger.info("Shutting down Mitgliederkarte API.")


app = FastAPI(
    title="Mitgliederkarte",
    description=(
        "Choroplethenkarte der Mitgliederzahlen je Gemeinde und Landkreis. "
        "Liefert gestylte GeoJSON-Ebenen und Popup-Texte fuer das Karten-Frontend."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/", tags=["Root"])
def root():
    return {
        "name": "Mitgliederkarte",
        "version": "1.0.0",
        "docs": "/docs",
        "description": "Membership choropleth of German municipalities and districts",
    }
