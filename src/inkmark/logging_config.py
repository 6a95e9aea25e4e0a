# logging_config.py
import logging

from rich.logging import RichHandler


def setup_logging(debug: bool = False) -> None:
    """Configure logging once for the entire application."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(name)s - %(message)s",
        handlers=[RichHandler(show_path=False)],
    )
