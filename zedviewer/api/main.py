"""
FastAPI application entry point for the zedviewer API.

Serves read-only views of the entry store plus star toggling and an
in-process reload.
"""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from zedviewer import __version__
from zedviewer.api.routes import entries, health, reload, search

app = FastAPI(title="zedviewer API", version=__version__)

# Allow origins from environment variable or default to localhost
cors_origins = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(entries.router, prefix="/api", tags=["entries"])
app.include_router(search.router, prefix="/api", tags=["search"])
app.include_router(reload.router, prefix="/api", tags=["reload"])
app.include_router(health.router, prefix="/api", tags=["health"])
