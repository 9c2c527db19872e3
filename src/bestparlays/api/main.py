"""CLI entrypoint to run the best parlays FastAPI server."""

from __future__ import annotations

import os

import uvicorn

from bestparlays.config import configure_logging, get_settings
from bestparlays.db.database import init_db


def main() -> None:
    configure_logging()
    init_db()
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run(
        "bestparlays.api.server:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        log_level=get_settings().log_level.lower(),
    )


if __name__ == "__main__":  # pragma: no cover
    main()
