import logging

import structlog


def configure_logging(level: int = logging.INFO, json: bool = True) -> None:
    """Configure structlog for application-wide logging.

    Initializes standard logging at the given level and renders structlog
    events with ISO timestamps, as JSON by default or as console lines
    for local scripts.
    """
    logging.basicConfig(level=level, format="%(message)s")
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


logger = structlog.get_logger()
