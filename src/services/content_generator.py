import asyncio
import logging
from typing import Any

import httpx

from core.exceptions import GenerationFault
from models.results import FellBack, Generated, GenerationResult

logger = logging.getLogger(__name__)

FUNDRAISER = "HopeSpring Foundation"


def build_prompt(name: str, amount: str, message: str | None = None) -> str:
    prompt = (
        f"Write a short, warm, and personal thank you message for a person named {name} "
        f"who just donated ${amount}. This donation is for our \"{FUNDRAISER}\" fundraiser, "
        f"which provides school supplies for underprivileged children. "
        f"Mention the impact on the children."
    )
    if message:
        prompt += (
            f" The donor also left this kind message: \"{message}\". "
            f"Please subtly weave a reference to their message into your thank you."
        )
    prompt += " Keep the tone grateful and heartfelt. Two sentences maximum."
    return prompt


def fallback_message(name: str, amount: str) -> str:
    return (
        f"Thank you so much for your generous donation of ${amount}, {name}! "
        f"Your support means the world to us and will make a real difference."
    )


def extract_candidate_text(payload: Any) -> str:
    """Return the trimmed text of the first candidate in a generateContent response."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise GenerationFault(f"Invalid response structure from Gemini API: {e!r}") from e

    if not isinstance(text, str) or not text.strip():
        raise GenerationFault("Gemini API returned an empty candidate")
    return text.strip()


class ContentGenerator:
    """Produces the acknowledgement line for a donation receipt with Gemini."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str | None,
        model: str = "gemini-1.5-flash-latest",
        api_base: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: float = 10.0
    ):
        self.http_client = http_client
        self.api_key = api_key
        self.endpoint = f"{api_base.rstrip('/')}/models/{model}:generateContent"
        self.timeout_seconds = timeout_seconds

    async def _request_text(self, prompt: str) -> str:
        if not self.api_key:
            raise GenerationFault("GEMINI_API_KEY is not configured")

        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            response = await asyncio.wait_for(
                self.http_client.post(self.endpoint, params={"key": self.api_key}, json=body),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise GenerationFault(f"Gemini API request timed out after {self.timeout_seconds}s") from e
        except Exception as e:
            raise GenerationFault(f"Gemini API request failed: {e!r}") from e

        if not response.is_success:
            raise GenerationFault(f"Gemini API request failed with status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise GenerationFault("Gemini API returned a non-JSON body") from e

        return extract_candidate_text(payload)

    async def generate(self, name: str, amount: str, message: str | None = None) -> GenerationResult:
        """
        Make exactly one call to Gemini. Any fault is logged and replaced by
        the fixed fallback text, so this never raises.
        """
        prompt = build_prompt(name, amount, message)
        try:
            text = await self._request_text(prompt)
        except GenerationFault as fault:
            logger.warning(f"Using fallback acknowledgement: {fault}")
            return FellBack(text=fallback_message(name, amount), fault=fault)

        logger.info("AI acknowledgement generated.")
        return Generated(text=text)
