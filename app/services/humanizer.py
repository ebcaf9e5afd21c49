from __future__ import annotations

import logging
import re
from typing import Any

from anthropic import APIError

from app.config import Settings
from app.core.anthropic_client import get_anthropic_client
from app.core.exceptions import IntegrationError

logger = logging.getLogger(__name__)

DEFAULT_TONE = "Standard"

TONE_INSTRUCTIONS = {
    "Standard": (
        "Write this as a fast, conversational rewrite while maintaining the exact original "
        "point of view."
    ),
    "Friendly": (
        "Make the tone warm, approachable, and encouraging. Use highly conversational, inviting "
        "language that puts the reader at ease, but strictly preserve the original author's "
        "point of view and perspective."
    ),
    "Professional": (
        "Make the tone sharp, articulate, and professional. It should sound intelligent and "
        "authoritative, yet still clear, without resorting to verbose academic jargon. Strictly "
        "preserve the original author's point of view and perspective."
    ),
    "Narrator": (
        "Give the text a slight storytelling quality, making the progression of ideas flow "
        "smoothly and vividly. Do NOT insert 'I', 'we', or 'us'; maintain the exact original "
        "point of view."
    ),
}

HUMANIZE_PROMPT = """
Role: You are an expert human copywriter. Your ONLY goal is to rewrite the provided text so that it registers as 0% AI-generated on all advanced AI detectors.

Tone Directive: {tone_instruction}

Constraints:

1. High Burstiness: Radically vary sentence lengths. Never write three sentences of similar length in a row. Follow a sprawling 30-word sentence with a jarring 3-word or 5-word one.

2. High Perplexity: Avoid predictable AI sentence structures and prepositional openers ("In the realm of", "As a", "Located in").

3. Vocabulary Blacklist: Use plain, precise, everyday English. FORBIDDEN WORDS: "delve", "tapestry", "crucial", "moreover", "furthermore", "overall", "in conclusion", "testament", "orchestrate", "seamless", "elevate", "nuance", "merely", "foster", "nurture", "champion".

4. Human Flaws & Informality: Start sentences with conjunctions (And, But, Yet) often. Be concise and direct, removing all filler.

5. Point of View: Keep the EXACT original perspective. Do NOT insert yourself as a narrator or participant. Do NOT summarize at the end.

6. Formatting: Output ONLY the rewritten text, no introductory remarks.
"""

DETECT_PROMPT = """
Role: You are an expert AI content detector.
Analyze the provided text and estimate what percentage of it was generated by an AI model. Look for common AI tropes: perfect grammar with little substance, hedging language, words like "crucial", "tapestry", "delve", predictable transitions ("Furthermore", "In conclusion"), and symmetrical paragraph lengths.
Predictable, robotic text that uses these tropes scores 80 to 100.
Asymmetrical paragraphs, natural contractions, sentences starting with conjunctions, active voice and a conversational sound score 0 to 20.
Output ONLY a single integer from 0 to 100. No percent sign, letters, words or explanations.
"""

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def count_words(text: str) -> int:
    """Whitespace-delimited token count used for the free-tier limit."""
    return len(text.split())


def tone_instruction(tone: str | None) -> str:
    return TONE_INSTRUCTIONS.get(tone or DEFAULT_TONE, TONE_INSTRUCTIONS[DEFAULT_TONE])


def parse_ai_percentage(output: str | None) -> int:
    """Leading integer of the detector reply, 0 when absent, clamped to 0..100."""
    match = _LEADING_INT.match(output or "")
    if not match:
        return 0
    return max(0, min(100, int(match.group(1))))


def _message_text(message: Any) -> str:
    parts = [
        block.text
        for block in getattr(message, "content", None) or []
        if getattr(block, "type", "text") == "text"
    ]
    return "".join(parts)


class HumanizerService:
    """Humanize and AI-detect operations backed by the Anthropic Messages API."""

    def __init__(self, settings: Settings, client: Any = None) -> None:
        self.settings = settings
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            api_key = self.settings.anthropic_api_key
            self._client = get_anthropic_client(
                api_key.get_secret_value() if api_key else None,
                self.settings.llm_timeout_seconds,
            )
        return self._client

    async def _complete(self, system: str, text: str, **params: Any) -> str:
        try:
            message = await self.client.messages.create(
                model=self.settings.anthropic_model,
                system=system,
                messages=[{"role": "user", "content": text}],
                **params,
            )
        except APIError as exc:
            raise IntegrationError(str(exc)) from exc
        return _message_text(message)

    async def humanize(self, text: str, tone: str | None = DEFAULT_TONE) -> str:
        system = HUMANIZE_PROMPT.format(tone_instruction=tone_instruction(tone))
        return await self._complete(system, text, max_tokens=4000, temperature=1.0, top_k=60)

    async def detect_ai_percentage(self, text: str) -> int:
        if not text or not text.strip():
            return 0
        output = await self._complete(DETECT_PROMPT, text, max_tokens=10, temperature=0.1)
        return parse_ai_percentage(output.strip() or "0")
