"""
Process entrypoint: validate configuration, then serve or run a startup check.

  python backend_entry.py                     -> start uvicorn with the FastAPI app
  python backend_entry.py --port 8080         -> same, on another port
  python backend_entry.py --check             -> run the full startup (connect, schema, modules)
                                                 without serving; exit 0 when ready, 1 otherwise

Exit status: 2 for invalid configuration, 1 for any other startup failure.
uvicorn itself exits non-zero when application startup fails.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

# When run as a script, ensure backend dir is on path so "from main import app" works
_backend_dir = Path(__file__).resolve().parent
if str(_backend_dir) not in sys.path:
    sys.path.insert(0, str(_backend_dir))

from core.composition import create_app
from core.config import Settings, get_settings
from core.errors import ConfigurationError, StartupError
from core.logging import setup_logging

logger = logging.getLogger(__name__)

EXIT_STARTUP_FAILURE = 1
EXIT_CONFIGURATION_ERROR = 2


async def check_startup(settings: Settings) -> int:
    """Run the whole startup sequence once, then shut down. Returns an exit status."""
    app = create_app(settings)
    app_module = app.state.app_module
    try:
        await app_module.start(app)
    except StartupError as e:
        logger.error("Startup check failed: %s", e)
        return EXIT_STARTUP_FAILURE
    await app_module.stop()
    logger.info("Startup check passed: modules=%s", ", ".join(app_module.registered))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="User management backend: server or startup check")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default 8000)")
    parser.add_argument("--check", action="store_true", help="Run startup checks and exit (no server)")
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
        settings.validate()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error("Invalid configuration: %s", e)
        return EXIT_CONFIGURATION_ERROR
    setup_logging(settings)

    if args.check:
        return asyncio.run(check_startup(settings))

    import uvicorn

    logger.info("Backend entry: host=%s port=%s env=%s", args.host, args.port, settings.env)
    uvicorn.run(
        create_app(settings),
        host=args.host,
        port=args.port,
        lifespan="on",
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
