"""Serve the API with Uvicorn.

Host and port come from ``HOST`` / ``PORT`` (see ``core.config``).

Usage:
    friendgraph
    python -m friendgraph.run
"""
from uvicorn import Config, Server

from friendgraph.core.config import get_settings


def main() -> None:
    settings = get_settings()
    config = Config(
        app="friendgraph.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    Server(config).run()


if __name__ == "__main__":
    main()
