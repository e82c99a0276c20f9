"""
Tenant Console Service Entrypoint

FastAPI application exposing tenant lifecycle operations.
"""
import logging
import os

from fastapi import FastAPI

from console.api import tenants
from console.config import CONSOLE_API_PORT, CONSOLE_BIND_HOST
from console.context import build_context

logger = logging.getLogger(__name__)

app = FastAPI(title="Tenant Console Service")

app.include_router(tenants.router)


def validate_bind_profile(host: str, port: int) -> None:
    if not str(host or "").strip():
        raise ValueError("host is required")
    if int(port) < 1 or int(port) > 65535:
        raise ValueError("port must be in range 1..65535")


@app.on_event("startup")
def startup_init():
    """Validate the bind profile and wire orchestrator collaborators"""
    startup_port = int(os.getenv("CONSOLE_API_PORT", str(CONSOLE_API_PORT)))
    startup_host = str(os.getenv("CONSOLE_BIND_HOST", CONSOLE_BIND_HOST))
    validate_bind_profile(startup_host, startup_port)

    tenants.set_context(build_context())
    logger.info("Tenant console startup complete")


@app.on_event("shutdown")
def shutdown_cleanup():
    tenants.set_context(None)
    logger.info("Tenant console shutdown complete")


@app.get("/")
def root():
    return {
        "service": "console",
        "message": "Tenant console service running",
    }
