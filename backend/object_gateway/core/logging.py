import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a stream handler on the root logger unless one exists."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # botocore is chatty at DEBUG and may echo request headers.
    logging.getLogger("botocore").setLevel(max(logging.INFO, logging.getLogger().level))
