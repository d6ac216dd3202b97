"""Run the API server: ``python -m shiftboard``."""

import uvicorn

from shiftboard.core.config import get_settings


def main():
    """Entry point for the server process."""
    settings = get_settings()
    uvicorn.run(
        "shiftboard.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development and settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    main()
