#!/usr/bin/env python
"""Start the SmartMess API under uvicorn.

Pending migrations are applied first when ``RUN_MIGRATIONS`` is enabled, so
a failing upgrade stops the deploy before the port opens. The server runs in
this process, which lets the app's own startup hook see the schema as done.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import uvicorn

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from smartmess.config import get_settings  # noqa: E402  (import after sys.path tweak)
from smartmess.migration_runner import run_migrations_once  # noqa: E402

logger = logging.getLogger("smartmess.runserver")


def main() -> int:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    if settings.run_migrations:
        try:
            run_migrations_once()
        except Exception:
            logger.exception("Migrations failed; not starting the server")
            return 1
    else:
        logger.info("RUN_MIGRATIONS disabled; starting without migrating")

    uvicorn.run(
        "smartmess.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
