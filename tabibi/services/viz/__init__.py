"""Visualization service."""

from tabibi.services.viz.formatter import format_annotation, serialize_payload
from tabibi.services.viz.models import (
    ChartDataset,
    ChartPayload,
    TablePayload,
    VisualizationDescriptor,
)
from tabibi.services.viz.service import VisualizationService, has_chart_keyword

__all__ = [
    "ChartDataset",
    "ChartPayload",
    "TablePayload",
    "VisualizationDescriptor",
    "VisualizationService",
    "format_annotation",
    "has_chart_keyword",
    "serialize_payload",
]
