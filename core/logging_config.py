import logging
import sys
import structlog

HANDLER_NAME = "resource_registry_stream"

def configure_logging(log_level: str = "INFO", force_json: bool = False, stream=None):
    """
    Configures structlog and standard library logging.

    Args:
        log_level: The minimum log level to output (e.g., "INFO", "DEBUG").
                   Unknown levels fall back to INFO with a warning.
        force_json: If True, always use JSONRenderer. Otherwise, uses ConsoleRenderer
                    when the stream is a TTY and JSONRenderer when it is not.
        stream: Where log lines go. Defaults to stdout.
    """
    stream = stream or sys.stdout
    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        timestamper,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]

    if force_json or not stream.isatty():
        final_processors = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        final_processors = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta] + final_processors,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(stream)
    handler.name = HANDLER_NAME
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    # Replace our own handler on reconfiguration, leave foreign ones alone
    for existing in list(root_logger.handlers):
        if existing.name == HANDLER_NAME:
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        root_logger.setLevel(logging.INFO)
        structlog.get_logger(__name__).warning("Invalid log level, defaulting to INFO", log_level=log_level)
    else:
        root_logger.setLevel(numeric_level)

    # uvicorn logs through the same handler
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
