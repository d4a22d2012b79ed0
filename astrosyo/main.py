"""FastAPI application setup for Astrosyo Observe Tonight."""

from fastapi import FastAPI

from .api import router as api_router

app = FastAPI(title="Astrosyo Observe Tonight")

# API routes
app.include_router(api_router, prefix="/v1")
