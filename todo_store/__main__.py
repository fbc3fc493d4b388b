"""Run the Todo Store API with uvicorn: ``python -m todo_store``."""

import uvicorn

from todo_store.config import get_settings
from todo_store.logging_setup import setup_logging


def main() -> None:
    settings = get_settings()
    setup_logging(console_level=settings.log_level, log_dir=settings.log_dir)
    uvicorn.run(
        "todo_store.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
