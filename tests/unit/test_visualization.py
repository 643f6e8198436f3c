"""Tests for the visualization service and annotation formatting."""

import json

import pytest

from tabibi.services.data import FetchedData
from tabibi.services.planning import Plan
from tabibi.services.viz import (
    VisualizationDescriptor,
    VisualizationService,
    format_annotation,
    has_chart_keyword,
    serialize_payload,
)

STATS = {
    "totalPatients": 12,
    "totalAppointments": 30,
    "confirmedAppointments": 20,
    "pendingAppointments": 10,
}


@pytest.fixture
def viz(settings):
    return VisualizationService(settings)


# ==========================================
#  Keyword override
# ==========================================


@pytest.mark.parametrize(
    "message",
    ["قارن بين الشهرين", "show me a chart", "إحصائيات العيادة", "Compare last week", "اعمل رسم"],
)
def test_chart_keyword_forces_chart(viz, message):
    plan = Plan.default(message)
    assert viz.effective_type(plan, message) == "chart"
    assert plan.building.response_type == "chart"


def test_chart_keyword_without_plan(viz):
    assert viz.effective_type(None, "chart please") == "chart"


def test_no_keyword_keeps_text(viz):
    plan = Plan.default("كام مريض عندي؟")
    assert viz.effective_type(plan, "كام مريض عندي؟") == "text"


def test_keyword_does_not_override_table(viz):
    plan = Plan.model_validate({"building": {"responseType": "table"}})
    assert viz.effective_type(plan, "قارن") == "table"


def test_has_chart_keyword_is_case_insensitive():
    assert has_chart_keyword("BAR graph")
    assert not has_chart_keyword("مرحبا")


@pytest.mark.parametrize(
    ("response_type", "kind"),
    [
        ("text", "text"),
        ("", "text"),
        ("chart", "chart"),
        ("bar_chart", "chart"),
        ("رسم بياني", "chart"),
        ("table", "table"),
        ("جدول", "table"),
        ("mixed", "mixed"),
        ("cards", "mixed"),
    ],
)
def test_classify(response_type, kind):
    assert VisualizationService.classify(response_type).value == kind


# ==========================================
#  Chart provider
# ==========================================


@pytest.mark.asyncio
async def test_chart_with_valid_json(viz, make_provider):
    chart = {
        "chartType": "bar",
        "title": "الحجوزات",
        "labels": ["يناير", "فبراير"],
        "datasets": [{"label": "عدد", "data": [3, 5], "color": "#3b82f6"}],
    }
    provider = make_provider("fast", replies=[f"```json\n{json.dumps(chart)}\n```"])

    descriptor = await viz.chart_with(provider, "رسم", FetchedData(context={}))

    assert descriptor == VisualizationDescriptor(type="chart", data=chart)
    [call] = provider.complete_calls
    assert call["temperature"] == 0.3
    assert call["max_tokens"] == 1024


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", ["no chart today", "[1, 2]", ""])
async def test_chart_with_unusable_reply_is_text(viz, make_provider, reply):
    descriptor = await viz.chart_with(make_provider("fast", replies=[reply]), "رسم", FetchedData({}))
    assert descriptor == VisualizationDescriptor.text()


# ==========================================
#  Manual fallback
# ==========================================


def test_manual_booking_source_chart(viz):
    appointments = [{"from": "clinic"}, {"from": "booking"}, {"from": "clinic"}, {"from": None}]
    fetched = FetchedData(context={"appointments": appointments}, stats=STATS)

    descriptor = viz.manual_chart("قارن حجوزات العيادة مع النت", fetched)

    assert descriptor.type == "chart"
    assert descriptor.data == {
        "chartType": "bar",
        "title": "مقارنة الحجوزات (عيادة vs نت)",
        "labels": ["حجوزات العيادة", "حجوزات النت"],
        "datasets": [{"label": "عدد الحجوزات", "data": [2, 1], "color": "#3b82f6"}],
    }


def test_manual_booking_query_without_appointments_uses_stats(viz):
    fetched = FetchedData(context={"appointments": []}, stats=STATS)
    descriptor = viz.manual_chart("العيادة ولا النت", fetched)

    assert descriptor.data["title"] == "إحصائيات العيادة"


def test_manual_stats_chart(viz):
    fetched = FetchedData(context={}, stats={"totalPatients": 12, "pendingAppointments": None})

    descriptor = viz.manual_chart("إحصائيات", fetched)

    assert descriptor.data == {
        "chartType": "bar",
        "title": "إحصائيات العيادة",
        "labels": ["المرضى", "الحجوزات", "المؤكد", "بالانتظار"],
        "datasets": [{"label": "العدد", "data": [12, 0, 0, 0], "color": "#10b981"}],
    }


def test_manual_without_stats_is_text(viz):
    assert viz.manual_chart("رسم", FetchedData(context={})) == VisualizationDescriptor.text()


def test_table_skeleton():
    descriptor = VisualizationService.table_skeleton()
    assert descriptor.type == "table"
    assert descriptor.data == {"title": "بيانات العيادة", "headers": ["الفئة", "العدد"], "rows": []}


# ==========================================
#  Annotation wire format
# ==========================================


def test_serialize_payload_matches_json_stringify():
    data = {"title": "t", "headers": ["a"], "rows": []}
    assert serialize_payload(data) == '{"title":"t","headers":["a"],"rows":[]}'


def test_serialize_payload_keeps_arabic():
    assert serialize_payload({"title": "بيانات"}) == '{"title":"بيانات"}'


def test_format_chart_annotation():
    descriptor = VisualizationDescriptor(type="chart", data={"chartType": "pie"})
    assert format_annotation(descriptor) == '\n\n[CHART:{"chartType":"pie"}]'


def test_empty_chart_payload_is_still_annotated():
    descriptor = VisualizationDescriptor(type="chart", data={})
    assert format_annotation(descriptor) == "\n\n[CHART:{}]"


def test_format_table_annotation():
    descriptor = VisualizationDescriptor(type="table", data={"title": "t"})
    assert format_annotation(descriptor) == '\n\n[TABLE:{"title":"t"}]'


@pytest.mark.parametrize(
    "descriptor",
    [
        None,
        VisualizationDescriptor.text(),
        VisualizationDescriptor(type="mixed"),
        VisualizationDescriptor(type="chart", data=None),
    ],
)
def test_no_annotation(descriptor):
    assert format_annotation(descriptor) == ""
