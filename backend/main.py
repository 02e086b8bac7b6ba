from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

import config
from startup_hub.api.admin import router as admin_router
from startup_hub.api.me import router as me_router
from startup_hub.api.startups import router as startups_router
from startup_hub.api.submissions import router as submissions_router
from startup_hub.services.exceptions import DirectoryError

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Startup Directory API",
    version="1.0.0",
    description="Public directory, submission intake and admin moderation for the regional startup ecosystem",
)

# Configure CORS using settings from config.py
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=config.CORS_ALLOW_CREDENTIALS,
    allow_methods=config.CORS_ALLOW_METHODS,
    allow_headers=config.CORS_ALLOW_HEADERS,
    expose_headers=config.CORS_EXPOSE_HEADERS,
    max_age=config.CORS_MAX_AGE
)


@app.exception_handler(DirectoryError)
async def directory_error_handler(request: Request, exc: DirectoryError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Mount the routers
app.include_router(submissions_router, prefix="/api/submissions", tags=["submissions"])
app.include_router(startups_router, prefix="/api/startups", tags=["startups"])
app.include_router(admin_router, prefix="/api/admin", tags=["admin"])
app.include_router(me_router, prefix="/api/me", tags=["me"])


@app.get("/")
async def read_root():
    return {"message": "Startup Directory API"}


@app.get("/health")
async def health_check():
    return {"status": "ok"}
