"""
Constants, enums, and static values.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    """AI pipeline phases."""

    IDLE = "idle"
    PLANNING = "planning"
    THINKING = "thinking"
    DATA_FETCHING = "data_fetching"
    READING = "reading"
    VISUALIZATION = "visualization"
    BUILDING = "building"
    COMPLETE = "complete"
    ERROR = "error"


# Forward order of the state machine; ERROR is reachable from any phase.
PHASE_ORDER: tuple[Phase, ...] = (
    Phase.IDLE,
    Phase.PLANNING,
    Phase.THINKING,
    Phase.DATA_FETCHING,
    Phase.READING,
    Phase.VISUALIZATION,
    Phase.BUILDING,
    Phase.COMPLETE,
)

TERMINAL_PHASES = frozenset({Phase.COMPLETE, Phase.ERROR})

PHASE_LABELS: dict[Phase, str] = {
    Phase.IDLE: "جاهز",
    Phase.PLANNING: "بخطط...",
    Phase.THINKING: "بفكر...",
    Phase.DATA_FETCHING: "بجيب البيانات...",
    Phase.READING: "بقرأ البيانات...",
    Phase.VISUALIZATION: "برسم البيانات...",
    Phase.BUILDING: "ببني الرد...",
    Phase.COMPLETE: "خلصت!",
    Phase.ERROR: "حصل مشكلة",
}

PHASE_DESCRIPTIONS: dict[Phase, str] = {
    Phase.PLANNING: "بعمل خطة للرد على سؤالك",
    Phase.THINKING: "بحدد البيانات اللي محتاجها من الداتابيز",
    Phase.DATA_FETCHING: "بجيب البيانات من قاعدة البيانات",
    Phase.READING: "بحلل البيانات",
    Phase.VISUALIZATION: "بحضّر الرسومات البيانية والجداول",
    Phase.BUILDING: "بجهز الرد النهائي",
}

PHASE_EMOJI: dict[Phase, str] = {
    Phase.PLANNING: "📋",
    Phase.THINKING: "🤔",
    Phase.DATA_FETCHING: "📊",
    Phase.READING: "📖",
    Phase.VISUALIZATION: "🎨",
    Phase.BUILDING: "🔨",
    Phase.COMPLETE: "✅",
    Phase.ERROR: "❌",
}
DEFAULT_EMOJI = "🤖"


class ResponseType(str, Enum):
    """Response shapes the planner can request."""

    TEXT = "text"
    CHART = "chart"
    TABLE = "table"
    MIXED = "mixed"


class ChartType(str, Enum):
    """Chart types for visualization."""

    LINE = "line"
    BAR = "bar"
    PIE = "pie"


# Planner table names (Arabic and English) -> physical tables.
TABLE_NAME_MAPPING: dict[str, str] = {
    "المرضى": "patients",
    "patients": "patients",
    "المواعيد": "appointments",
    "الحجوزات": "appointments",
    "appointments": "appointments",
    "الزيارات": "visits",
    "الكشوفات": "visits",
    "visits": "visits",
    "المالية": "financial_records",
    "financial_records": "financial_records",
    "الإشعارات": "notifications",
    "notifications": "notifications",
    "العيادة": "clinics",
    "clinics": "clinics",
    "الخطط": "patient_plans",
    "patient_plans": "patient_plans",
    "القوالب": "treatment_templates",
    "treatment_templates": "treatment_templates",
}

# Substrings in the raw user message that force a chart response.
CHART_KEYWORDS: tuple[str, ...] = (
    "رسم",
    "مقارنة",
    "قارن",
    "إحصائيات",
    "احصائيات",
    "توضيح",
    "بيوضح",
    "chart",
    "compare",
    "comparison",
    "statistics",
    "trend",
    "line",
    "bar",
)

# Booking-source comparison: both words of one pair must appear.
BOOKING_SOURCE_PHRASES: tuple[tuple[str, str], ...] = (
    ("العيادة", "النت"),
    ("clinic", "online"),
)
BOOKING_SOURCE_CLINIC = "clinic"
BOOKING_SOURCE_ONLINE = "booking"

# Static fallbacks delivered when every provider of a phase failed.
ANALYSIS_FALLBACK_TEXT = "تم جلب البيانات بنجاح"
BUILD_FALLBACK_PREFIX = "تم تحليل البيانات بنجاح."
BUILD_FALLBACK_EMPTY_ANALYSIS = "البيانات متاحة للعرض."
BUILD_PROMPT_EMPTY_ANALYSIS = "تم جلب البيانات"
BUILD_SIMPLE_PROMPT_EMPTY_ANALYSIS = "بيانات متاحة"

TABLE_SKELETON_TITLE = "بيانات العيادة"
TABLE_SKELETON_HEADERS: tuple[str, ...] = ("الفئة", "العدد")


def log_pipeline_phase(phase: Phase) -> None:
    """Log the start of a pipeline phase with its description."""
    description = PHASE_DESCRIPTIONS.get(phase, "")
    logger.info("%s: %s", phase.value, description)
