"""Inline annotation formatting: ``[CHART:...]`` / ``[TABLE:...]`` markers."""

import json
from typing import Any

from tabibi.config.constants import ResponseType
from tabibi.services.viz.models import VisualizationDescriptor

ANNOTATION_SEPARATOR = "\n\n"

_MARKERS = {
    ResponseType.CHART.value: "CHART",
    ResponseType.TABLE.value: "TABLE",
}


def serialize_payload(data: Any) -> str:
    """Serialize a payload the way browsers' JSON.stringify does (compact, UTF-8)."""
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def format_annotation(descriptor: VisualizationDescriptor | None) -> str:
    """Return the annotation to append after the prose, or ``""`` when there is none."""
    if descriptor is None or not descriptor.has_annotation:
        return ""
    marker = _MARKERS[descriptor.type]
    return f"{ANNOTATION_SEPARATOR}[{marker}:{serialize_payload(descriptor.data)}]"
