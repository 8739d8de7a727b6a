"""
TourStack Backend - Unified Application Entry Point
Mounts the service routers under a single FastAPI application
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.audio_collections.app import lifespan
from services.audio_collections.app import router as audio_collections_router
from shared.utils import config, setup_logging

logger = setup_logging("tourstack-backend")

app = FastAPI(
    title="TourStack Backend API",
    description="""
    Museum tour content API.

    Audio collections: one text, many languages, generated with Deepgram or ElevenLabs.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Health",
            "description": "Service health and status endpoints",
        },
        {
            "name": "Audio Collections",
            "description": "Multi-language audio generation - mounted at /api/v1/audio-collections",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(audio_collections_router, prefix="/api/v1/audio-collections", tags=["Audio Collections"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint with service information and API navigation"""
    return {
        "service": "TourStack Backend API",
        "version": "1.0.0",
        "services": {
            "audio_collections": {
                "base_url": "/api/v1/audio-collections",
                "health": "/api/v1/audio-collections/health",
            },
        },
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json",
        },
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for all services"""
    return {
        "status": "healthy",
        "services": {
            "api_gateway": "operational",
            "audio_collections": "operational",
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting TourStack Backend on http://0.0.0.0:8000")
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
