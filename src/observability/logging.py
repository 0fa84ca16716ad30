"""Structured JSON logging with node context."""
import logging
import sys
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

from src.config import Settings, get_settings


NODE_CONTEXT_FIELDS = ("node_type", "node_name", "workflow_id")


class NodeContextFilter(logging.Filter):
    """Add node context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add default node context fields if not present."""
        for field_name in NODE_CONTEXT_FIELDS:
            if not hasattr(record, field_name):
                setattr(record, field_name, None)
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with standardized field names."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to the log record."""
        super().add_fields(log_record, record, message_dict)

        if "timestamp" not in log_record:
            log_record["timestamp"] = self.formatTime(record, self.datefmt)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        for field_name in NODE_CONTEXT_FIELDS:
            value = getattr(record, field_name, None)
            if value:
                log_record[field_name] = value
            else:
                log_record.pop(field_name, None)


def build_handler(settings: Settings) -> logging.Handler:
    """Create the stdout handler for the configured output format."""
    handler = logging.StreamHandler(sys.stdout)

    if settings.log_json:
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    handler.setFormatter(formatter)
    handler.addFilter(NodeContextFilter())
    return handler


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure logging for the node pack."""
    settings = settings or get_settings()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(build_handler(settings))
    root_logger.setLevel(settings.log_level.upper())

    # Node loggers carry the client's own diagnostics; only the library's
    # module-level loggers are quieted.
    logging.getLogger("slack_sdk").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.LoggerAdapter:
    """
    Get a logger with node context support.

    Args:
        name: Logger name (typically __name__)

    Returns:
        LoggerAdapter that can accept node context in extra dict
    """
    logger = logging.getLogger(name)
    return logging.LoggerAdapter(logger, extra={})


def with_node_context(
    node_type: Optional[str] = None,
    node_name: Optional[str] = None,
    workflow_id: Optional[str] = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Create an extra dict with node context for logging.

    Args:
        node_type: Node type identifier
        node_name: Node instance name
        workflow_id: Workflow the node runs in
        **kwargs: Additional context fields

    Returns:
        Dict to pass as extra parameter to logger methods
    """
    extra = kwargs.copy()
    if node_type:
        extra["node_type"] = node_type
    if node_name:
        extra["node_name"] = node_name
    if workflow_id:
        extra["workflow_id"] = workflow_id
    return extra
