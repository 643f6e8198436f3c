"""
Planning agent prompts.
"""

PLANNING_SYSTEM_PROMPT = (
    "أنت مساعد ذكي لعيادة طبية. رد بصيغة JSON فقط. "
    "لو المستخدم طلب رسم بياني أو مقارنة أو إحصائيات، responseType لازم يكون 'chart'."
)


def build_planning_prompt(user_message: str) -> str:
    """Build the todo-list prompt the planner sends for one user message."""
    return f"""
أنت مساعد ذكي لعيادة طبية. المستخدم سأل: "{user_message}"

اعمل todo list للرد على السؤال ده. القائمة لازم تحتوي على 4 أقسام:

## requests
- ايه الطلبات اللي المستخدم عايزها بالظبط؟

## data
- ايه البيانات اللي محتاجينها من الداتابيز؟
- اكتب اسماء الجداول والحقول المطلوبة

## actions
- ايه الإجراءات اللي هنعملها (لو فيه)؟

## building
- ازاي هنعرض الرد للمستخدم؟
- **مهم جداً:** responseType لازم يكون:
  * "chart" → لو السؤال فيه: رسم بياني، إحصائيات، مقارنة، توضيح بياني, line chart, bar chart
  * "table" → لو السؤال طالب جدول أو قائمة مفصلة
  * "text" → لو سؤال عادي

رد بصيغة JSON فقط:
{{
  "requests": ["طلب 1", "طلب 2"],
  "data": {{
    "tables": ["اسم الجدول"],
    "fields": ["الحقول المطلوبة"],
    "queries": ["وصف الاستعلام"]
  }},
  "actions": ["إجراء 1"],
  "building": {{
    "responseType": "chart",
    "chartType": "line|bar|pie",
    "components": ["المكونات المطلوبة"]
  }}
}}
"""
