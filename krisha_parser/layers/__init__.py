"""Layers package initialization."""
from krisha_parser.layers.search import SearchLayer, build_filter_url
from krisha_parser.layers.detail import DetailLayer

__all__ = ["SearchLayer", "build_filter_url", "DetailLayer"]
