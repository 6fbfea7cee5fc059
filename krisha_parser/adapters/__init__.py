"""Adapters package initialization."""
from krisha_parser.adapters.krisha_client import KrishaClient, BROWSER_HEADERS

__all__ = ["KrishaClient", "BROWSER_HEADERS"]
