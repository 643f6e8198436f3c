"""
Visualization agent prompts.
"""

import json
from typing import Any

VIZ_SYSTEM_PROMPT = "أنت خبير تحليل بيانات. رد بصيغة JSON فقط."


def build_chart_prompt(user_message: str, fetched_data: dict[str, Any]) -> str:
    """Ask for a chart specification built from the fetched data."""
    data = json.dumps(fetched_data, ensure_ascii=False, indent=2, default=str)
    return f"""
أنت خبير في تحليل البيانات. المستخدم سأل: "{user_message}"

## البيانات المتاحة:
{data}

جهّز بيانات الرسم البياني بصيغة JSON:
{{
  "chartType": "bar",  // استخدم bar للإحصائيات، line للتطور الزمني، pie للنسب
  "title": "عنوان الرسم بالعربي",
  "labels": [أسماء الفئات],
  "datasets": [
    {{
      "label": "اسم البيانات",
      "data": [القيم الرقمية],
      "color": "#3b82f6"
    }}
  ]
}}

**مهم جداً:**
- استخدم البيانات الفعلية من fetchedData
- العناوين بالعربي
- رجّع JSON فقط بدون أي نص إضافي
"""
