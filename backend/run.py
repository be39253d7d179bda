"""
Notification service startup script.

Usage:
    python run.py
    python run.py --reload
    python run.py --port 8080

On Windows the SelectorEventLoop policy is set before uvicorn creates its
loop, which psycopg's async driver requires.
"""

import os
import sys

if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    # Reloaded subprocesses inherit the fix through the environment
    os.environ["NOTIFICATION_SERVICE_WINDOWS_LOOP_FIX"] = "1"

import uvicorn

from notification_service.config import settings


def main() -> None:
    """Start the FastAPI application."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the notification service")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.backend_port, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    print(f"[STARTUP] Starting notification service on {args.host}:{args.port} (reload={args.reload})")

    uvicorn.run(
        "notification_service.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        loop="asyncio",
    )


if __name__ == "__main__":
    main()
