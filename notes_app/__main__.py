"""Run the API with uvicorn: ``python -m notes_app``."""

import uvicorn

from notes_app.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "notes_app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
