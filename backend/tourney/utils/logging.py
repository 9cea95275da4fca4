import logging

from tourney.config import Environment, environment


def create_logger(level: int) -> logging.Logger:
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(log_format))

    logger = logging.getLogger("tourney")
    logger.setLevel(level)
    if not logger.handlers:
        logger.addHandler(handler)
    return logger


logger = create_logger(
    {
        Environment.CI: logging.WARNING,
        Environment.DEVELOPMENT: logging.DEBUG,
        Environment.PRODUCTION: logging.INFO,
    }[environment]
)
