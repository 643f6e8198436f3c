"""
JSON Parser utility for extracting JSON from LLM responses.
"""
import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


class JSONParser:
    """Helper class to extract clean JSON from LLM responses."""

    @staticmethod
    def extract_json(text: str, default: Any = None) -> Any:
        """Parse the JSON a model returned, fenced or bare.

        A fenced block (optionally tagged ``json``) wins over the rest of the
        text; without a fence the whole string is parsed. Anything that does
        not parse returns ``default`` unchanged.
        """
        if not isinstance(text, str):
            return default

        match = _FENCE_RE.search(text)
        candidate = match.group(1) if match and match.group(1) else text

        try:
            return json.loads(candidate.strip())
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("JSONParser: Could not extract JSON from text (%s), using default", e)
            return default
