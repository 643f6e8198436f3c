"""Charts built locally when the chart provider is unreachable."""

import logging
from typing import Any

from tabibi.config.constants import (
    BOOKING_SOURCE_CLINIC,
    BOOKING_SOURCE_ONLINE,
    BOOKING_SOURCE_PHRASES,
    ChartType,
)
from tabibi.services.data.fetcher import FetchedData
from tabibi.services.viz.models import ChartDataset, ChartPayload

logger = logging.getLogger(__name__)

BOOKING_SOURCE_TITLE = "مقارنة الحجوزات (عيادة vs نت)"
BOOKING_SOURCE_LABELS = ["حجوزات العيادة", "حجوزات النت"]
BOOKING_SOURCE_DATASET_LABEL = "عدد الحجوزات"
BOOKING_SOURCE_COLOR = "#3b82f6"

STATS_TITLE = "إحصائيات العيادة"
STATS_LABELS = ["المرضى", "الحجوزات", "المؤكد", "بالانتظار"]
STATS_KEYS = (
    "totalPatients",
    "totalAppointments",
    "confirmedAppointments",
    "pendingAppointments",
)
STATS_DATASET_LABEL = "العدد"
STATS_COLOR = "#10b981"


def is_booking_source_query(user_message: str) -> bool:
    """True when the message names both booking channels of one phrase pair."""
    message = user_message.lower()
    return any(
        clinic_word in message and online_word in message
        for clinic_word, online_word in BOOKING_SOURCE_PHRASES
    )


def booking_source_chart(appointments: list[dict[str, Any]]) -> dict[str, Any]:
    """Two bars: bookings made at the clinic vs. booked online."""
    sources = [a.get("from") for a in appointments if isinstance(a, dict)]
    chart = ChartPayload(
        chart_type=ChartType.BAR.value,
        title=BOOKING_SOURCE_TITLE,
        labels=BOOKING_SOURCE_LABELS,
        datasets=[
            ChartDataset(
                label=BOOKING_SOURCE_DATASET_LABEL,
                data=[
                    sources.count(BOOKING_SOURCE_CLINIC),
                    sources.count(BOOKING_SOURCE_ONLINE),
                ],
                color=BOOKING_SOURCE_COLOR,
            )
        ],
    )
    return chart.to_dict()


def stats_chart(stats: dict[str, Any]) -> dict[str, Any]:
    """Four bars from the dashboard counters; missing counters count as 0."""
    chart = ChartPayload(
        chart_type=ChartType.BAR.value,
        title=STATS_TITLE,
        labels=STATS_LABELS,
        datasets=[
            ChartDataset(
                label=STATS_DATASET_LABEL,
                data=[_count(stats.get(key)) for key in STATS_KEYS],
                color=STATS_COLOR,
            )
        ],
    )
    return chart.to_dict()


def _count(value: Any) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def build_manual_chart(user_message: str, fetched: FetchedData) -> dict[str, Any] | None:
    """
    Best-effort chart from data already in hand.

    Booking-source questions get a clinic/online split of the context
    appointments; otherwise dashboard stats are charted. Returns None when
    neither applies.
    """
    appointments = fetched.appointments
    if is_booking_source_query(user_message) and appointments:
        logger.info("Building booking-source chart from %d appointments", len(appointments))
        return booking_source_chart(appointments)
    if isinstance(fetched.stats, dict):
        logger.info("Building dashboard stats chart")
        return stats_chart(fetched.stats)
    return None
