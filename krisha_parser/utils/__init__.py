"""Utils package initialization."""
from krisha_parser.utils.logger import get_logger, LayerLogger, set_trace_id

__all__ = ["get_logger", "LayerLogger", "set_trace_id"]
