"""
AI Collaborator (Gemini)
========================
Category inference, pronoun coreference alignment and rule generation via
Google Gemini.

Responses are parsed leniently: anything that is not the expected JSON is
treated as an empty answer. Transport failures raise SourceUnavailable.

Requires: pip install google-genai
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types

from ..config import AIConfig, get_config
from ..config_logging import SourceUnavailable, get_logger
from ..pov.categories import POVCategory

__version__ = "1.0.0"

logger = get_logger('inline_suggest.ai')

JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

CATEGORY_PROMPT = """Paragraph: "{context}"
The user is focused on the word "{anchor}".

Decide whether "{anchor}" refers to a character and which pronoun set that
character uses: he, she, or they. Answer "unknown" if you cannot tell.

Return ONLY a JSON object:
{{"pov": "he" | "she" | "they" | "unknown"}}
"""

ALIGN_PROMPT = """Paragraph: "{context}"
The user is focused on the character "{anchor}", whose pronouns are "{target}".

Identify every pronoun in this paragraph that refers to THIS specific
character and does not already use the "{target}" set. Do not include
pronouns that refer to anyone else. Offsets are 0-based character offsets
into the paragraph exactly as given.

Return ONLY a JSON object:
{{"pronouns": [{{"offset": number, "length": number, "original": "string", "replacement": "string"}}]}}
"""

RULE_PROMPT = """You are a grammar rule specialist.
Convert the following user intent into a rule for a regex-based style checker.
The user wants to: "{intent}"

Return ONLY a JSON object:
{{"pattern": "a Python regular expression matching the ERROR (not the correction)",
  "message": "a human readable explanation",
  "replacement": "the suggested replacement, or an empty string"}}
Use \\\\b for word boundaries.
"""


def parse_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """First {...} block in text as a dict; None when absent or malformed."""
    if not text:
        return None
    cleaned = text.replace("```json", "").replace("```", "")
    m = JSON_OBJECT.search(cleaned)
    if not m:
        return None
    try:
        data = json.loads(m.group())
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


class AICollaborator(ABC):
    """What the engine needs from an AI service."""

    @abstractmethod
    async def infer_category(self, context: str, anchor: str) -> Optional[POVCategory]:
        """Category for anchor in context; None means unknown."""

    @abstractmethod
    async def align_pronouns(self, context: str, anchor: str,
                             target: POVCategory) -> List[Dict[str, Any]]:
        """Replacements {offset, length, original, replacement} for anchor's pronouns."""

    @abstractmethod
    async def generate_rule(self, intent: str) -> Optional[Dict[str, Any]]:
        """{pattern, message, replacement} for an intent, or None."""


class GeminiCollaborator(AICollaborator):
    """AICollaborator backed by the google-genai async client."""

    def __init__(self, config: Optional[AIConfig] = None, client=None):
        self.config = config or get_config().ai
        self._client = client

    @property
    def client(self):
        """Async client (genai.Client(...).aio), created on first use."""
        if self._client is None:
            api_key = self.config.api_key
            if not api_key:
                raise SourceUnavailable(
                    f"{self.config.api_key_env} is not set", source="gemini")
            self._client = genai.Client(api_key=api_key).aio
        return self._client

    async def _generate(self, prompt: str) -> Optional[Dict[str, Any]]:
        try:
            response = await self.client.models.generate_content(
                model=self.config.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                ),
            )
        except SourceUnavailable:
            raise
        except Exception as e:
            raise SourceUnavailable(f"Gemini request failed: {e}", source="gemini") from e

        data = parse_json_object(getattr(response, 'text', None))
        if data is None:
            logger.debug("Unparseable Gemini response treated as empty")
        return data

    async def infer_category(self, context: str, anchor: str) -> Optional[POVCategory]:
        data = await self._generate(CATEGORY_PROMPT.format(context=context, anchor=anchor))
        if not data:
            return None
        return POVCategory.parse(data.get('pov'))

    async def align_pronouns(self, context: str, anchor: str,
                             target: POVCategory) -> List[Dict[str, Any]]:
        data = await self._generate(
            ALIGN_PROMPT.format(context=context, anchor=anchor, target=target.value))
        if not data:
            return []
        pronouns = data.get('pronouns')
        return pronouns if isinstance(pronouns, list) else []

    async def generate_rule(self, intent: str) -> Optional[Dict[str, Any]]:
        return await self._generate(RULE_PROMPT.format(intent=intent))
