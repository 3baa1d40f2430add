import logging


def setup_logging(level: str = "INFO") -> None:
    """Attach a console handler to the root logger.

    Does nothing when the root logger already has handlers, so calling
    ``create_app`` repeatedly (tests, reloads) does not duplicate output.
    """
    logger = logging.getLogger()
    if logger.handlers:
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
