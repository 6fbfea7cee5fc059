"""
Structured logging for the Krisha listings parser.

Every entry carries the trace id of the API request that produced it, so a
search or detail request can be followed from fetch to extraction.
"""
import uuid
import logging
import structlog
from contextvars import ContextVar
from typing import Any, Dict, List, Optional

from krisha_parser.config import config

# Set once per API request by the route handlers
trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")


def set_trace_id(trace_id: Optional[str] = None) -> str:
    """Start a new request context; returns the id in use."""
    new_trace_id = trace_id or uuid.uuid4().hex[:8]
    trace_id_var.set(new_trace_id)
    return new_trace_id


def add_trace_id(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """structlog processor stamping the request trace id (empty outside a request)."""
    event_dict["trace_id"] = trace_id_var.get()
    return event_dict


def configure_logging():
    processors = [
        structlog.contextvars.merge_contextvars,
        add_trace_id,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if config.LOG_FORMAT == "json":
        # keep Cyrillic field values readable
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, config.LOG_LEVEL.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


class LayerLogger:
    """
    Logger bound to one component: the HTTP client, the search layer or the
    detail layer. Extraction code never logs; these are the only events
    the service emits.
    """

    def __init__(self, layer_name: str):
        self.layer_name = layer_name
        self.logger = structlog.get_logger(layer_name).bind(layer=layer_name)

    def log_action(self, action: str, status: str = "started", **extra):
        """Start or completion of a fetch or extraction step."""
        self.logger.info(f"action_{status}", action=action, **extra)

    def log_decision(self, decision: str, reason: str, url: Optional[str] = None, **extra):
        """Which source supplied a value, e.g. the analytics endpoint or the page."""
        self.logger.info("decision_made", decision=decision, reason=reason, url=url, **extra)

    def log_fallback(self, from_source: str, to_source: str, reason: str, **extra):
        self.logger.warning(
            "fallback_triggered",
            from_source=from_source,
            to_source=to_source,
            reason=reason,
            **extra
        )

    def log_error(self, error: str, error_type: str = "unknown", **extra):
        self.logger.error("error_occurred", error=error, error_type=error_type, **extra)

    def log_http_fetch(self, url: str, status_code: Optional[int], result: str, **extra):
        """Outcome of one request to krisha.kz ("ok", "rejected")."""
        self.logger.info("http_fetch", url=url, status_code=status_code, result=result, **extra)

    def log_extraction(self, kind: str, fields_present: List[str], fields_missing: List[str], **extra):
        """Listing fields found and not found on one page."""
        self.logger.info(
            "content_extracted",
            kind=kind,
            fields_present=fields_present,
            fields_missing=fields_missing,
            **extra
        )


configure_logging()
