"""Application entry point: serve the API with uvicorn."""

import os

import uvicorn

from workout_content.config import SETTINGS
from workout_content.logging_setup import setup_logging


def main() -> None:
    setup_logging(SETTINGS.LOG_LEVEL.upper())
    uvicorn.run(
        "workout_content.server.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_config=None,
    )


if __name__ == "__main__":
    main()
