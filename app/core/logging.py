import logging

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler once and apply the configured level."""
    logging.basicConfig(format=_FORMAT)
    logging.getLogger().setLevel(level.upper())
