import logging, structlog

def configure_logging(level: str = "INFO", cache_loggers: bool = True):
    lvl = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=lvl)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(lvl),
        cache_logger_on_first_use=cache_loggers,
    )
