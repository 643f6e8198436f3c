"""
Reading (data analysis) prompts.
"""

import json
from typing import Any

ANALYSIS_SYSTEM_PROMPT = "أنت محلل بيانات طبية. حلل البيانات واكتب ملخص مفيد."
ANALYSIS_COMPACT_SYSTEM_PROMPT = (
    "أنت محلل بيانات طبية. حلل البيانات واكتب ملخص مفيد باللهجة المصرية."
)


def _dump(value: Any, indent: int | None = 2) -> str:
    return json.dumps(value, ensure_ascii=False, indent=indent, default=str)


def _name_of(entity: Any, *keys: str) -> str:
    if not isinstance(entity, dict):
        return ""
    for key in keys:
        if entity.get(key):
            return str(entity[key])
    return ""


def build_assistant_system_prompt(
    user: Any,
    clinic: Any,
    subscription: Any,
    stats: Any = None,
    context: Any = None,
) -> str:
    """Describe who is asking and what the clinic looks like right now."""
    user_name = _name_of(user, "name", "full_name", "email") or "المستخدم"
    user_role = _name_of(user, "role") or "doctor"
    clinic_name = _name_of(clinic, "name", "clinic_name") or "العيادة"
    plan_name = _name_of(subscription, "name", "plan_name", "plan") or "غير معروف"

    sections = [
        "أنت \"طبيبي\"، مساعد ذكي لإدارة العيادات الطبية.",
        f"- المستخدم: {user_name} ({user_role})",
        f"- العيادة: {clinic_name}",
        f"- الباقة الحالية: {plan_name}",
    ]
    if stats:
        sections.append(f"## إحصائيات لوحة التحكم:\n{_dump(stats)}")
    if isinstance(context, dict) and context:
        counts = {
            key: len(value) for key, value in context.items() if isinstance(value, list)
        }
        if counts:
            sections.append(f"## حجم البيانات المتاحة:\n{_dump(counts)}")
    sections.append(
        "رد دايماً باللهجة المصرية، بشكل ودود ومختصر، ومتألفش أرقام مش موجودة في البيانات."
    )
    return "\n".join(sections)


def build_analysis_prompt(
    system_prompt: str,
    fetched_data: dict[str, Any],
    plan: dict[str, Any],
    user_message: str,
) -> str:
    """Build the composite prompt for the deep-analysis provider."""
    return f"""
{system_prompt}

## البيانات المتاحة:
{_dump(fetched_data)}

## خطة العمل:
{_dump(plan)}

## سؤال المستخدم:
{user_message}

حلل البيانات دي وجهز تحليل شامل يساعد في الرد على السؤال.
اكتب التحليل باللهجة المصرية وبشكل بسيط.
"""


def build_compact_analysis_prompt(fetched_data: dict[str, Any]) -> str:
    """Build the compact prompt used when the deep-analysis provider is down."""
    return f"حلل البيانات دي: {_dump(fetched_data, indent=None)}"
