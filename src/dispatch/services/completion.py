"""Chat completion service via LiteLLM Router.

Provides the orchestrator's language layer with:
- Two model groups: "chat" for customer-facing replies and "classify" for
  low-temperature intent classification
- Anthropic and/or OpenAI deployments depending on configured keys
- Prompt injection detection and sanitization on user-supplied content
- Helpers that fold specialist data into a persona reply

When no provider key is configured the service reports is_configured() as
False and the orchestrator answers from canned replies instead.
"""

from __future__ import annotations

import json
import re
from typing import Any

import structlog
from litellm import Router

from src.dispatch.config import get_settings

logger = structlog.get_logger(__name__)

EMPTY_REPLY_APOLOGY = (
    "I apologize, but I couldn't generate a response. Please try again or call us at 0728 400 200."
)

# Number of prior conversation messages sent with each reply request.
HISTORY_WINDOW = 10

# ── Prompt Injection Detection ────────────────────────────────────────────────

_INJECTION_PATTERNS: dict[str, re.Pattern] = {
    "instruction_override": re.compile(
        r"(ignore|disregard|forget|override)\s+(all\s+)?(your\s+|the\s+)?(previous\s+)?instructions",
        re.IGNORECASE,
    ),
    "system_prompt_exfiltration": re.compile(
        r"(reveal|show|display|print|repeat)\s+(your\s+)?(system\s+prompt|instructions)|"
        r"repeat\s+everything\s+above|"
        r"what\s+are\s+your\s+instructions",
        re.IGNORECASE,
    ),
    "role_hijacking": re.compile(
        r"you\s+are\s+now\s+|"
        r"pretend\s+(to\s+be|you\s+are)|"
        r"from\s+now\s+on\s+you\s+are|"
        r"assume\s+the\s+role\s+of",
        re.IGNORECASE,
    ),
    "control_characters": re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]{3,}"),
}


def detect_prompt_injection(text: str) -> str | None:
    """Return the name of the first injection pattern found in text, if any."""
    for pattern_name, pattern in _INJECTION_PATTERNS.items():
        if pattern.search(text):
            logger.warning(
                "prompt_injection_detected",
                pattern=pattern_name,
                text_preview=text[:100],
            )
            return pattern_name
    return None


def sanitize_messages(messages: list[dict]) -> list[dict]:
    """Strip injection patterns from non-system messages.

    System messages are trusted and passed through unchanged.
    """
    sanitized = []
    for msg in messages:
        content = msg.get("content") or ""
        if msg.get("role") == "system" or not content:
            sanitized.append(msg)
            continue

        pattern_name = detect_prompt_injection(content)
        if pattern_name is None:
            sanitized.append(msg)
            continue

        cleaned = content
        for pattern in _INJECTION_PATTERNS.values():
            cleaned = pattern.sub("[removed]", cleaned)
        logger.warning(
            "prompt_injection_sanitized",
            role=msg.get("role"),
            pattern=pattern_name,
            original_length=len(content),
            cleaned_length=len(cleaned),
        )
        sanitized.append({**msg, "content": cleaned})
    return sanitized


def extract_json_object(content: str) -> dict:
    """Parse a JSON object from model output, tolerating surrounding text.

    Raises:
        ValueError: If no JSON object can be parsed.
    """
    content = content.strip()
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        start = content.find("{")
        end = content.rfind("}") + 1
        if start < 0 or end <= start:
            raise ValueError(f"Model returned non-JSON output: {content[:200]}")
        try:
            parsed = json.loads(content[start:end])
        except json.JSONDecodeError as exc:
            raise ValueError(f"Model returned malformed JSON: {content[:200]}") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Model returned JSON that is not an object")
    return parsed


# ── Completion Service ────────────────────────────────────────────────────────


class CompletionService:
    """Completion provider abstraction with LiteLLM Router.

    Args:
        system_prompt: Persona prompt for replies. Defaults to the
            orchestrator's Melvin prompt.
        classifier_prompt: Instructions for intent classification. Defaults
            to the orchestrator's classifier prompt.
    """

    def __init__(
        self,
        system_prompt: str | None = None,
        classifier_prompt: str | None = None,
    ) -> None:
        if system_prompt is None or classifier_prompt is None:
            from src.dispatch.agents.orchestrator.prompts import (
                INTENT_CLASSIFIER_PROMPT,
                ORCHESTRATOR_SYSTEM_PROMPT,
            )

            system_prompt = system_prompt or ORCHESTRATOR_SYSTEM_PROMPT
            classifier_prompt = classifier_prompt or INTENT_CLASSIFIER_PROMPT
        self.system_prompt = system_prompt
        self.classifier_prompt = classifier_prompt

        settings = get_settings()
        model_list = []

        if settings.ANTHROPIC_API_KEY:
            for group in ("chat", "classify"):
                model_list.append({
                    "model_name": group,
                    "litellm_params": {
                        "model": "anthropic/claude-3-5-haiku-20241022",
                        "api_key": settings.ANTHROPIC_API_KEY,
                    },
                })

        if settings.OPENAI_API_KEY:
            for group in ("chat", "classify"):
                model_list.append({
                    "model_name": group,
                    "litellm_params": {
                        "model": "openai/gpt-4o-mini",
                        "api_key": settings.OPENAI_API_KEY,
                    },
                })

        if not model_list:
            logger.warning("completion_service_unconfigured")
            self.router = None
            return

        self.router = Router(
            model_list=model_list,
            num_retries=settings.LLM_MAX_RETRIES,
            timeout=settings.LLM_TIMEOUT,
            allowed_fails=3,
            cooldown_time=30,
        )

    def is_configured(self) -> bool:
        return self.router is not None

    async def completion(
        self,
        messages: list[dict],
        model: str = "chat",
        max_tokens: int = 500,
        temperature: float = 0.7,
        metadata: dict | None = None,
    ) -> dict:
        """Execute a completion call through the LiteLLM Router.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            model: Model group name ("chat" or "classify").
            max_tokens: Maximum tokens in the response.
            temperature: Sampling temperature (0-2).
            metadata: Additional metadata to include in the call.

        Returns:
            Dict with content, model and usage.

        Raises:
            RuntimeError: If no provider keys are configured.
        """
        if not self.router:
            raise RuntimeError("No LLM API keys configured")

        response = await self.router.acompletion(
            model=model,
            messages=sanitize_messages(messages),
            max_tokens=max_tokens,
            temperature=temperature,
            metadata=metadata or {},
        )

        usage = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return {
            "content": response.choices[0].message.content or "",
            "model": response.model,
            "usage": usage,
        }

    async def chat_completion(
        self,
        system_prompt: str,
        history: list[dict],
        user_message: str,
        context: str | None = None,
    ) -> str:
        """Produce a persona reply to ``user_message``.

        Sends the system prompt (with an "Additional Context" section when
        context is given), the last HISTORY_WINDOW user/assistant messages,
        then the new user message.
        """
        system_content = system_prompt
        if context:
            system_content = f"{system_prompt}\n\n## Additional Context\n{context}"

        messages: list[dict] = [{"role": "system", "content": system_content}]
        for entry in history[-HISTORY_WINDOW:]:
            if entry.get("role") in ("user", "assistant"):
                messages.append({"role": entry["role"], "content": entry.get("content", "")})
        messages.append({"role": "user", "content": user_message})

        result = await self.completion(
            messages=messages,
            model="chat",
            max_tokens=500,
            temperature=0.7,
            metadata={"purpose": "chat_response"},
        )
        return result["content"].strip() or EMPTY_REPLY_APOLOGY

    async def generate_response(
        self,
        message: str,
        history: list[dict],
        context: str | None = None,
    ) -> str:
        return await self.chat_completion(self.system_prompt, history, message, context)

    async def generate_data_response(
        self,
        message: str,
        data: Any,
        data_type: str,
        history: list[dict],
    ) -> str:
        """Reply to ``message`` using specialist data as added context.

        Args:
            data_type: "order", "pricing", "customer", "support" or "contact".
        """
        from src.dispatch.agents.orchestrator.prompts import build_data_context

        return await self.generate_response(message, history, build_data_context(data, data_type))

    async def classify_intent(self, message: str) -> dict:
        """Classify a customer message into an intent with entities.

        Returns:
            Dict with intent, confidence and entities. Output that is not a
            JSON object yields UNKNOWN with confidence 0.5; any provider
            failure yields UNKNOWN with confidence 0.
        """
        try:
            result = await self.completion(
                messages=[
                    {"role": "system", "content": self.classifier_prompt},
                    {"role": "user", "content": message},
                ],
                model="classify",
                max_tokens=200,
                temperature=0.1,
                metadata={"purpose": "intent_classification"},
            )
        except Exception as exc:
            logger.error("intent_classification_failed", error=str(exc))
            return {"intent": "UNKNOWN", "confidence": 0.0, "entities": {}}

        try:
            parsed = extract_json_object(result["content"] or "{}")
        except ValueError:
            logger.warning("intent_classification_unparseable", content=result["content"][:200])
            return {"intent": "UNKNOWN", "confidence": 0.5, "entities": {}}

        return {
            "intent": parsed.get("intent") or "UNKNOWN",
            "confidence": parsed.get("confidence") or 0.5,
            "entities": parsed.get("entities") or {},
        }


# ── Singleton ─────────────────────────────────────────────────────────────────

_completion_service: CompletionService | None = None


def get_completion_service() -> CompletionService:
    """Get or create the completion service singleton."""
    global _completion_service
    if _completion_service is None:
        _completion_service = CompletionService()
    return _completion_service
