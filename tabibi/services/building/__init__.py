"""Response building service."""

from tabibi.services.building.builder import ChunkCallback, ResponseBuilder

__all__ = ["ChunkCallback", "ResponseBuilder"]
