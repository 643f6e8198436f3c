"""
Response building prompts.
"""

BUILD_SYSTEM_PROMPT = "أنت مساعد طبي. رد باللهجة المصرية بشكل مختصر."
BUILD_FALLBACK_SYSTEM_PROMPT = "أنت مساعد طبي. رد بإيجاز."


def build_response_prompt(user_message: str, analysis_excerpt: str) -> str:
    """Prompt for the final answer; visuals are appended by code, never written as text."""
    return f"""أنت مساعد طبي ذكي.

## التحليل:
{analysis_excerpt}

## التعليمات:
- رد باللهجة المصرية البسيطة
- اكتب نص بسيط يشرح البيانات
- **لا ترسم رسومات بيانية في النص**
- الرسومات هتتضاف تلقائياً بعد كلامك

السؤال: {user_message}"""


def build_simple_response_prompt(user_message: str, analysis_excerpt: str) -> str:
    """Shorter prompt for the fallback provider."""
    return f"""التحليل: {analysis_excerpt}

رد على: {user_message}

اكتب رد بسيط باللهجة المصرية."""
