"""Chat-completion client for workout generation.

Each invocation makes at most two calls: one in JSON mode and, only when the
model rejects ``response_format``, one plain-text retry that asks for a bare
JSON object. Every other failure is surfaced as ``ModelInvocationError``.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import openai

from fitcoach.core.config import Settings
from fitcoach.observability.metrics import log_metric
from fitcoach.observability.tracing import annotate, trace

logger = logging.getLogger(__name__)

JSON_ONLY_INSTRUCTION = "Return ONLY a valid JSON object. Do not include markdown fences or any commentary."
_UNSUPPORTED_MODE = re.compile(r"response_format", re.IGNORECASE)


class ModelInvocationError(RuntimeError):
    """The model call failed or returned nothing usable."""


@dataclass
class ModelCompletion:
    content: str
    model: str
    usage: Optional[Dict[str, Any]] = None
    structured: bool = True
    attempts: List[str] = field(default_factory=list)


class WorkoutModelClient:
    """Thin wrapper over an ``openai.OpenAI``-compatible client."""

    def __init__(
        self,
        client: Any,
        *,
        model: str,
        temperature: float = 0.6,
        max_tokens: int = 2400,
    ) -> None:
        self._client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> "WorkoutModelClient":
        client = openai.OpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout_seconds,
            max_retries=0,
        )
        return cls(
            client,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        )

    def complete_json(self, messages: List[Dict[str, str]]) -> ModelCompletion:
        with trace("workout.model.invoke", metadata={"model": self.model}) as invoke_trace:
            structured = True
            try:
                completion = self._create(messages, structured=True)
            except Exception as exc:
                if not (isinstance(exc, openai.OpenAIError) and _UNSUPPORTED_MODE.search(str(exc))):
                    logger.error("Model call failed (%s): %s", type(exc).__name__, exc)
                    raise ModelInvocationError("Model call failed") from exc
                logger.warning("Model rejected JSON mode (%s); retrying with plain-text instruction", exc)
                log_metric("workout.model.fallback_used", 1, {"model": self.model})
                structured = False
                fallback_messages = [*messages, {"role": "system", "content": JSON_ONLY_INSTRUCTION}]
                try:
                    completion = self._create(fallback_messages, structured=False)
                except Exception as retry_exc:
                    logger.error("Fallback model call failed (%s): %s", type(retry_exc).__name__, retry_exc)
                    raise ModelInvocationError("Model call failed") from retry_exc
            result = self._to_result(completion, structured=structured)
            result.attempts.extend(["structured"] if structured else ["structured", "plain"])
            annotate(invoke_trace, structured=result.structured, usage=result.usage)
            return result

    def _create(self, messages: List[Dict[str, str]], *, structured: bool) -> Any:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if structured:
            kwargs["response_format"] = {"type": "json_object"}
        return self._client.chat.completions.create(**kwargs)

    def _to_result(self, completion: Any, *, structured: bool) -> ModelCompletion:
        choices = getattr(completion, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        content = getattr(message, "content", None)
        if not content or not isinstance(content, str):
            suffix = "" if structured else " (fallback)"
            logger.error("Model returned no usable content%s", suffix)
            raise ModelInvocationError(f"Empty model response{suffix}.")
        return ModelCompletion(
            content=content,
            model=getattr(completion, "model", None) or self.model,
            usage=_usage_snapshot(getattr(completion, "usage", None)),
            structured=structured,
        )


def _usage_snapshot(usage: Any) -> Optional[Dict[str, Any]]:
    if usage is None:
        return None
    if isinstance(usage, dict):
        return dict(usage)
    if hasattr(usage, "model_dump"):
        return usage.model_dump(exclude_none=True)
    return {
        key: getattr(usage, key)
        for key in ("prompt_tokens", "completion_tokens", "total_tokens")
        if getattr(usage, key, None) is not None
    }
