from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from urbassist.config import settings
from urbassist.api.routes import router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    description=(
        "Parcel geometry and French planning rules: merge cadastral parcels, "
        "classify boundaries, measure site plans and determine whether a "
        "project needs a déclaration préalable or a permis de construire."
    ),
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "endpoints": {
            "api_docs": "/docs",
            "health": "/health",
            "calculate": "POST /api/calculate",
            "merge": "POST /api/cadastre/merge",
            "edges": "POST /api/cadastre/edges",
            "roads": "POST /api/cadastre/roads",
            "construction_types": "GET /api/construction-types",
            "resolve": "POST /api/construction-types/resolve",
            "decision": "POST /api/decision",
            "protections": "POST /api/protections/classify",
            "report": "POST /api/regulatory/report",
        },
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
