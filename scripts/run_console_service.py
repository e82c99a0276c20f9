"""
Tenant Console Service Launcher

Starts the tenant console API from the console/ package.

This service provides:
- Tenant listing and summaries (capacity, zones, state)
- Zone expansion with topology validation
- Image, console image and pull secret updates
- Tenant admin endpoint health probes

Usage:
    python scripts/run_console_service.py --host 0.0.0.0 --port 9090

Environment Variables:
    CONSOLE_API_PORT: API port (default: 9090)
    CONSOLE_BIND_HOST: Bind address (default: 0.0.0.0)
    CONSOLE_K8S_API_URL: Kubernetes API server URL
    CONSOLE_LOG_LEVEL: Logging level (default: INFO)
"""
import argparse
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import uvicorn

from shared.logging_config import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the tenant console service")
    parser.add_argument("--host", default=os.getenv("CONSOLE_BIND_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("CONSOLE_API_PORT", "9090")))
    parser.add_argument("--log-level", default=os.getenv("CONSOLE_LOG_LEVEL", "INFO"))
    parser.add_argument("--log-file", default=os.getenv("CONSOLE_LOG_FILE"))
    args = parser.parse_args()

    logger = setup_logging("console", level=args.log_level, log_file=args.log_file)
    logger.info(f"API Address: {args.host}:{args.port}")
    logger.info(f"Orchestrator: {os.getenv('CONSOLE_K8S_API_URL', 'https://kubernetes.default.svc')}")

    os.environ["CONSOLE_API_PORT"] = str(args.port)
    os.environ["CONSOLE_BIND_HOST"] = args.host

    uvicorn.run("console.service:app", host=args.host, port=args.port, reload=False, log_config=None)


if __name__ == "__main__":
    main()
