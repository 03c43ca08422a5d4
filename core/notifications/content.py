"""
Notification text generation through an ordered chain of LLM providers.

Each provider gets exactly one call per generate(); the first one that
returns usable text wins and its name travels with the text so the UI can
show where it came from.
"""

import logging
import os
from dataclasses import dataclass

from litellm import acompletion

from core.enums import ScheduleKind
from core.models import Event
from core.notifications.results import Err, Ok, Result
from core.notifications.templates import build_event_context, get_message

logger = logging.getLogger(__name__)

PROVIDER_TIMEOUT_SECONDS = float(os.environ.get("PROVIDER_TIMEOUT_SECONDS", "30"))
MAX_TOKENS = 800
TEMPERATURE = 0.8


@dataclass
class GeneratedContent:
    text: str
    provider: str


class CompletionProvider:
    """One LLM backend reached through LiteLLM."""

    def __init__(self, name: str, model: str, api_key_env: str):
        self.name = name
        self.model = model
        self.api_key_env = api_key_env

    @property
    def api_key(self) -> str | None:
        return os.environ.get(self.api_key_env)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def complete(self, prompt: str) -> Result:
        """
        Run a single completion.

        Returns:
            Ok(text) with non-blank text, or Err(reason). Never raises.
        """
        if not self.is_configured():
            return Err(f"{self.api_key_env} not set")

        try:
            response = await acompletion(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=MAX_TOKENS,
                temperature=TEMPERATURE,
                timeout=PROVIDER_TIMEOUT_SECONDS,
                num_retries=0,
                api_key=self.api_key,
            )
        except Exception as e:
            logger.warning(f"{self.name} completion failed: {e}")
            return Err(str(e) or type(e).__name__)

        choices = getattr(response, "choices", None) or []
        text = choices[0].message.content if choices else None
        if not text or not text.strip():
            return Err("empty response")
        return Ok(text.strip())


class ContentProviderChain:
    """Tries providers in order until one produces text."""

    def __init__(self, providers: list[CompletionProvider]):
        self.providers = providers

    async def generate(self, prompt: str) -> GeneratedContent | None:
        for provider in self.providers:
            result = await provider.complete(prompt)
            if isinstance(result, Ok):
                logger.info(f"Generated content with {provider.name}")
                return GeneratedContent(text=result.value, provider=provider.name)
            logger.info(f"{provider.name} unavailable: {result.reason}")

        logger.warning("All content providers failed")
        return None


def default_chain() -> ContentProviderChain:
    """OpenAI first, Gemini as fallback. Models can be overridden from env."""
    return ContentProviderChain(
        [
            CompletionProvider(
                name="OpenAI",
                model=os.environ.get("PRIMARY_MODEL", "openai/gpt-4o"),
                api_key_env="OPENAI_API_KEY",
            ),
            CompletionProvider(
                name="Gemini",
                model=os.environ.get("SECONDARY_MODEL", "gemini/gemini-2.0-flash"),
                api_key_env="GEMINI_API_KEY",
            ),
        ]
    )


def build_notification_prompt(event: Event, kind: ScheduleKind) -> str:
    return get_message("schedule_notification", "prompt", build_event_context(event, kind))


def build_fallback_body(event: Event, kind: ScheduleKind) -> str:
    """Fixed-format body used when no provider produced text."""
    return get_message(
        "schedule_notification", "fallback_body", build_event_context(event, kind)
    )


async def generate_event_copy(
    event: Event,
    style: str,
    chain: ContentProviderChain | None = None,
) -> dict:
    """
    Generate promotional copy for an event.

    Returns:
        {"text": str | None, "provider": str | None}
    """
    context = {**build_event_context(event), "style": style}
    prompt = get_message("event_copy", "prompt", context)
    generated = await (chain or default_chain()).generate(prompt)
    if generated is None:
        return {"text": None, "provider": None}
    return {"text": generated.text, "provider": generated.provider}
