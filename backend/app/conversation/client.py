"""Chat completion and transcription clients for the language-model provider."""

from __future__ import annotations

import json
import socket
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Protocol
from urllib import error as urllib_error
from urllib import request as urllib_request

from app.config import Settings, get_settings
from app.conversation.errors import (
    LLMNetworkError,
    LLMProviderError,
    LLMTimeoutError,
    ProviderNotConfiguredError,
)


class ChatCompletionClient(Protocol):
    """Protocol for chat completion providers."""

    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        """Return assistant text for the provided conversation."""


@dataclass(frozen=True, slots=True)
class Transcript:
    text: str
    duration_sec: float | None = None


class TranscriptionClient(Protocol):
    """Protocol for speech-to-text providers."""

    def transcribe(self, audio: bytes, *, filename: str, content_type: str) -> Transcript:
        """Return the text spoken in ``audio``."""


def _send(req: urllib_request.Request, timeout_seconds: float) -> dict[str, Any]:
    """Send ``req`` and decode the JSON body, mapping failures to provider errors."""

    try:
        with urllib_request.urlopen(req, timeout=timeout_seconds) as resp:
            raw = resp.read().decode("utf-8")
    except urllib_error.HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace")
        raise LLMProviderError(f"OpenAI HTTP {exc.code}: {detail}", status_code=exc.code) from exc
    except urllib_error.URLError as exc:
        if isinstance(exc.reason, (socket.timeout, TimeoutError)):
            raise LLMTimeoutError(f"OpenAI request timed out: {exc.reason}") from exc
        raise LLMNetworkError(f"OpenAI request failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise LLMTimeoutError("OpenAI response timed out") from exc
    except OSError as exc:
        raise LLMNetworkError(f"OpenAI connection error: {exc}") from exc

    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise LLMProviderError("OpenAI returned a non-JSON response") from exc
    if not isinstance(decoded, dict):
        raise LLMProviderError("OpenAI returned an unexpected response")
    return decoded


@dataclass(slots=True)
class OpenAIChatClient:
    """Minimal OpenAI Chat Completions client using stdlib HTTP."""

    api_key: str
    model: str
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: float = 60

    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        payload: dict[str, object] = {
            "model": self.model,
            "temperature": temperature,
            "messages": messages,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        url = f"{self.base_url.rstrip('/')}/chat/completions"
        req = urllib_request.Request(
            url=url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        decoded = _send(req, self.timeout_seconds)
        try:
            content = decoded["choices"][0]["message"]["content"]
            if not isinstance(content, str) or not content.strip():
                raise TypeError("assistant message content missing")
            return content.strip()
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMProviderError("OpenAI returned an unexpected chat response") from exc


def encode_multipart(fields: dict[str, str], files: dict[str, tuple[str, str, bytes]]) -> tuple[bytes, str]:
    """Encode form ``fields`` and ``files`` (name -> filename, content type, bytes).

    Returns the body and the matching ``Content-Type`` header value.
    """

    boundary = f"----learnlog{uuid.uuid4().hex}"
    parts: list[bytes] = []
    for name, value in fields.items():
        parts.append(
            f'--{boundary}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n{value}\r\n'.encode("utf-8")
        )
    for name, (filename, content_type, data) in files.items():
        header = (
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
            f"Content-Type: {content_type}\r\n\r\n"
        )
        parts.append(header.encode("utf-8") + data + b"\r\n")
    parts.append(f"--{boundary}--\r\n".encode("utf-8"))
    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


@dataclass(slots=True)
class OpenAITranscriptionClient:
    """OpenAI audio transcription client using stdlib HTTP."""

    api_key: str
    model: str = "whisper-1"
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: float = 60

    def transcribe(self, audio: bytes, *, filename: str, content_type: str) -> Transcript:
        body, multipart_type = encode_multipart(
            {"model": self.model, "response_format": "json"},
            {"file": (filename, content_type, audio)},
        )
        req = urllib_request.Request(
            url=f"{self.base_url.rstrip('/')}/audio/transcriptions",
            data=body,
            method="POST",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": multipart_type,
            },
        )
        decoded = _send(req, self.timeout_seconds)
        text = decoded.get("text")
        if not isinstance(text, str):
            raise LLMProviderError("OpenAI returned an unexpected transcription response")
        duration = decoded.get("duration")
        return Transcript(
            text=text.strip(),
            duration_sec=float(duration) if isinstance(duration, (int, float)) and duration else None,
        )


def _require_api_key(settings: Settings) -> str:
    if not settings.openai_api_key:
        raise ProviderNotConfiguredError(
            "OPENAI_API_KEY is not configured. Set it in backend/.env before using the assistants."
        )
    return settings.openai_api_key


def get_chat_client(model: str, *, settings: Settings | None = None) -> ChatCompletionClient:
    """Return the configured provider client for ``model``."""

    settings = settings or get_settings()
    return OpenAIChatClient(
        api_key=_require_api_key(settings),
        model=model,
        base_url=settings.openai_base_url,
        timeout_seconds=max(
            settings.turn_timeout_seconds,
            settings.extraction_timeout_seconds,
            settings.syllabus_timeout_seconds,
        ),
    )


def get_transcription_client(model: str, *, settings: Settings | None = None) -> TranscriptionClient:
    settings = settings or get_settings()
    return OpenAITranscriptionClient(
        api_key=_require_api_key(settings),
        model=model,
        base_url=settings.openai_base_url,
        timeout_seconds=settings.transcription_timeout_seconds,
    )


ClientFactory = Callable[[str], ChatCompletionClient]
TranscriptionClientFactory = Callable[[str], TranscriptionClient]


def get_client_factory() -> ClientFactory:
    """Dependency returning the factory routers use to build provider clients."""

    return get_chat_client


def get_transcription_client_factory() -> TranscriptionClientFactory:
    return get_transcription_client
