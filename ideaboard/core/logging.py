import logging

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once, console only."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    if not root.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(console_handler)

    logging.getLogger(__name__).info("Logging initialized at level %s", level.upper())
