"""Run the API server.

Usage:
    python -m api

Binds to HOST:PORT from the environment (see common.config).
"""

import uvicorn

from common.config import settings


def main() -> None:
    """Start uvicorn with the configured bind address and log level."""
    uvicorn.run(
        "api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
