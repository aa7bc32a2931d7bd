from __future__ import annotations

import json
import logging
import random
import re
import time
from email.utils import parsedate_to_datetime
from typing import Any

import requests

from app.config import get_settings

logger = logging.getLogger(__name__)

LLM_BACKOFF_BASE_SECONDS = 1.0
LLM_BACKOFF_JITTER_SECONDS = 0.5
LLM_BACKOFF_MAX_SECONDS = 30.0

JSON_ONLY_SUFFIX = "IMPORTANT: Respond ONLY with valid JSON. No additional text or explanation."

_FENCED_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


class DeepSeekError(RuntimeError):
    """Raised when the completion API cannot produce a usable answer."""


class AIServiceNotConfigured(DeepSeekError):
    pass


def _retry_after_seconds(headers: Any) -> float:
    raw = str((headers or {}).get("Retry-After", "")).strip()
    if not raw:
        return 0.0
    try:
        return max(0.0, float(raw))
    except ValueError:
        pass
    try:
        dt = parsedate_to_datetime(raw)
    except (TypeError, ValueError):
        return 0.0
    if dt is None:
        return 0.0
    return max(0.0, dt.timestamp() - time.time())


def _backoff_seconds(attempt: int) -> float:
    return min(
        LLM_BACKOFF_MAX_SECONDS,
        (LLM_BACKOFF_BASE_SECONDS * (2**attempt)) + random.uniform(0, LLM_BACKOFF_JITTER_SECONDS),
    )


def _error_message(res: requests.Response) -> str:
    try:
        body = res.json()
    except ValueError:
        return res.reason or res.text[:200]
    err = body.get("error", {}) if isinstance(body, dict) else {}
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    return res.reason or ""


def extract_json_text(text: str) -> str:
    """Pick the JSON payload out of a model reply.

    A fenced code block wins; otherwise the first of the outermost ``{...}`` or
    ``[...]`` spans; otherwise the text as-is.
    """
    fenced = _FENCED_RE.search(text or "")
    if fenced:
        return fenced.group(1).strip()
    obj = _OBJECT_RE.search(text or "")
    arr = _ARRAY_RE.search(text or "")
    if obj and arr:
        return obj.group(0) if obj.start() < arr.start() else arr.group(0)
    if obj:
        return obj.group(0)
    if arr:
        return arr.group(0)
    return text


class DeepSeekClient:
    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        max_attempts: int | None = None,
        timeout_seconds: int | None = None,
    ) -> None:
        settings = get_settings()
        self.api_key = (api_key if api_key is not None else settings.deepseek_api_key).strip()
        self.base_url = (base_url or settings.deepseek_base_url).rstrip("/")
        self.model = model or settings.deepseek_model
        self.temperature = settings.deepseek_temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.deepseek_max_tokens
        self.max_attempts = max(1, max_attempts or settings.deepseek_max_attempts)
        self.timeout_seconds = timeout_seconds or settings.request_timeout_seconds

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/chat/completions"
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}
        last_error = "no attempt made"
        for attempt in range(self.max_attempts):
            is_last = attempt >= self.max_attempts - 1
            try:
                res = requests.post(url, json=payload, headers=headers, timeout=self.timeout_seconds)
            except requests.RequestException as exc:
                last_error = f"transport error: {exc}"
                if is_last:
                    break
                wait_seconds = _backoff_seconds(attempt)
                logger.warning(
                    "DeepSeek transport error attempt=%s/%s wait=%.2fs err=%s",
                    attempt + 1,
                    self.max_attempts,
                    wait_seconds,
                    exc,
                )
                time.sleep(wait_seconds)
                continue

            if res.status_code < 400:
                try:
                    return res.json()
                except ValueError as exc:
                    raise DeepSeekError("DeepSeek returned a non-JSON body") from exc

            last_error = f"{res.status_code} - {_error_message(res)}"
            retriable = res.status_code == 429 or res.status_code >= 500
            if not retriable:
                raise DeepSeekError(f"DeepSeek API error: {last_error}")
            if is_last:
                break
            wait_seconds = max(_retry_after_seconds(res.headers), _backoff_seconds(attempt))
            logger.warning(
                "DeepSeek transient failure status=%s attempt=%s/%s wait=%.2fs",
                res.status_code,
                attempt + 1,
                self.max_attempts,
                wait_seconds,
            )
            time.sleep(wait_seconds)

        logger.warning("DeepSeek request failed after %s attempts: %s", self.max_attempts, last_error)
        raise DeepSeekError(f"DeepSeek API request failed after retries: {last_error}")

    def chat(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        if not self.is_configured:
            raise AIServiceNotConfigured("DEEPSEEK_API_KEY is not set")
        body = self._post(
            {
                "model": self.model,
                "messages": messages,
                "temperature": self.temperature if temperature is None else temperature,
                "max_tokens": max_tokens or self.max_tokens,
                "stream": False,
            }
        )
        choices = body.get("choices") if isinstance(body, dict) else None
        if not choices:
            raise DeepSeekError("No response from DeepSeek API")
        content = (choices[0].get("message") or {}).get("content")
        if content is None:
            raise DeepSeekError("DeepSeek response has no message content")
        return str(content)

    def complete(self, prompt: str, system_prompt: str | None = None) -> str:
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return self.chat(messages)

    def generate_json(self, prompt: str, system_prompt: str | None = None) -> Any:
        full_system = f"{system_prompt}\n\n{JSON_ONLY_SUFFIX}" if system_prompt else JSON_ONLY_SUFFIX
        response = self.complete(prompt, full_system)
        try:
            return json.loads(extract_json_text(response))
        except ValueError as exc:
            logger.warning("DeepSeek returned unparseable JSON: %s", response[:400])
            raise DeepSeekError(f"Invalid JSON response from DeepSeek: {exc}") from exc
