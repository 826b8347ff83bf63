"""
Wedding Invitation Platform - FastAPI Backend
Main application entry point
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from app.core.config import settings
from app.api import routes_public, routes_rsvp, routes_tenant
from app.middleware import TenantMiddleware
from app.services.repositories import use_database
from app.utils.errors import TenantStoreError
from app.utils.responses import tenant_store_exception_handler

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    if use_database():
        from app.core.db import get_engine, init_db
        init_db(get_engine())
        logger.info("Relational backend initialized")
    else:
        os.makedirs(settings.DATA_DIR, exist_ok=True)
        logger.info(f"File backend initialized at {settings.DATA_DIR}")
    yield
    logger.info("Application shutdown")

# Create FastAPI application
app = FastAPI(
    title="Wedding Invitation Platform",
    description="Multi-tenant wedding invitation and RSVP backend",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TenantMiddleware)

app.add_exception_handler(TenantStoreError, tenant_store_exception_handler)

# Include routers; the public router holds the catch-all tenant page and goes last
app.include_router(routes_tenant.router, prefix="/api", tags=["tenant"])
app.include_router(routes_rsvp.router, prefix="/api", tags=["rsvp"])
app.include_router(routes_public.router, tags=["public"])

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
