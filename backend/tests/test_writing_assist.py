"""Tests for the one-shot writing helpers and voice transcription."""

from __future__ import annotations

import asyncio
import time
import unittest

from app.config import Settings
from app.conversation.client import Transcript, encode_multipart, get_transcription_client
from app.conversation.errors import (
    ExtractionError,
    InvalidInputError,
    LLMTimeoutError,
    ProviderNotConfiguredError,
)
from app.services import writing_assist


class _StubChatClient:
    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.calls: list[list[dict[str, str]]] = []
        self.kwargs: list[dict[str, object]] = []

    def complete(self, messages, *, temperature=0.7, max_tokens=None):  # noqa: ANN001
        self.calls.append(list(messages))
        self.kwargs.append({"temperature": temperature, "max_tokens": max_tokens})
        return self.reply


class _StubTranscriptionClient:
    def __init__(self, transcript: Transcript, *, delay: float = 0.0) -> None:
        self.transcript = transcript
        self.delay = delay
        self.calls: list[tuple[str, str, bytes]] = []

    def transcribe(self, audio, *, filename, content_type):  # noqa: ANN001
        self.calls.append((filename, content_type, audio))
        if self.delay:
            time.sleep(self.delay)
        return self.transcript


_SETTINGS = Settings(openai_api_key="test-key")


class WritingAssistTests(unittest.TestCase):
    def test_enhance_injects_style_instruction(self) -> None:
        client = _StubChatClient("Polished text.")

        result = asyncio.run(writing_assist.enhance("rough text", "casual", client=client, settings=_SETTINGS))

        self.assertEqual(result, "Polished text.")
        self.assertIn("friendly, approachable tone", client.calls[0][0]["content"])
        self.assertNotIn("{style_instruction}", client.calls[0][0]["content"])
        self.assertEqual(client.calls[0][1], {"role": "user", "content": "rough text"})
        self.assertEqual(client.kwargs[0], {"temperature": 0.3, "max_tokens": 2000})

    def test_enhance_rejects_unknown_style_without_calling(self) -> None:
        client = _StubChatClient("unused")

        with self.assertRaises(InvalidInputError):
            asyncio.run(writing_assist.enhance("text", "pirate", client=client, settings=_SETTINGS))  # type: ignore[arg-type]

        self.assertEqual(client.calls, [])

    def test_blank_input_is_rejected(self) -> None:
        with self.assertRaises(InvalidInputError):
            asyncio.run(writing_assist.expand("   ", client=_StubChatClient("x"), settings=_SETTINGS))

    def test_expand_and_summarize_sampling(self) -> None:
        expand_client = _StubChatClient("Draft.")
        summary_client = _StubChatClient("TL;DR.")

        asyncio.run(writing_assist.expand("- a\n- b", client=expand_client, settings=_SETTINGS))
        asyncio.run(writing_assist.summarize("long text", client=summary_client, settings=_SETTINGS))

        self.assertEqual(expand_client.kwargs[0], {"temperature": 0.4, "max_tokens": 2000})
        self.assertEqual(summary_client.kwargs[0], {"temperature": 0.2, "max_tokens": 150})

    def test_metadata_goes_through_parse_cascade(self) -> None:
        client = _StubChatClient(
            "Sure! {'tags': ['Neural-Networks', 'pytorch'], 'tools': ['PyTorch'], 'minutes': '120', 'mood': '😄',}"
        )

        metadata = asyncio.run(writing_assist.extract_metadata("Spent 2 hours on PyTorch", client=client, settings=_SETTINGS))

        self.assertEqual(metadata.tags, ["neural-networks", "pytorch"])
        self.assertEqual(metadata.tools, ["PyTorch"])
        self.assertEqual(metadata.minutes, 120)
        self.assertEqual(metadata.mood, "😄")

    def test_metadata_failure_raises_extraction_error(self) -> None:
        with self.assertRaises(ExtractionError):
            asyncio.run(
                writing_assist.extract_metadata("text", client=_StubChatClient("no json here"), settings=_SETTINGS)
            )

    def test_blank_input_never_builds_a_client(self) -> None:
        requested: list[str] = []

        def factory(model: str) -> _StubChatClient:
            requested.append(model)
            return _StubChatClient("unused")

        with self.assertRaises(InvalidInputError):
            asyncio.run(writing_assist.summarize("  ", client_factory=factory, settings=_SETTINGS))

        self.assertEqual(requested, [])

    def test_factory_builds_assist_model_client(self) -> None:
        requested: list[str] = []
        client = _StubChatClient("Short.")

        def factory(model: str) -> _StubChatClient:
            requested.append(model)
            return client

        tldr = asyncio.run(writing_assist.summarize("long text", client_factory=factory, settings=_SETTINGS))

        self.assertEqual(tldr, "Short.")
        self.assertEqual(requested, [_SETTINGS.assist_model])


class TranscriptionTests(unittest.TestCase):
    def test_audio_is_sent_with_media_type(self) -> None:
        client = _StubTranscriptionClient(Transcript(text="Worked on agents today.", duration_sec=3.5))

        transcript = asyncio.run(
            writing_assist.transcribe(
                b"voice-bytes",
                filename="note.webm",
                content_type="audio/webm;codecs=opus",
                client=client,
                settings=_SETTINGS,
            )
        )

        self.assertEqual(transcript.text, "Worked on agents today.")
        self.assertEqual(transcript.duration_sec, 3.5)
        self.assertEqual(client.calls, [("note.webm", "audio/webm", b"voice-bytes")])

    def test_missing_filename_gets_a_default(self) -> None:
        client = _StubTranscriptionClient(Transcript(text="ok"))

        asyncio.run(
            writing_assist.transcribe(b"x", filename=None, content_type="audio/webm", client=client, settings=_SETTINGS)
        )

        self.assertEqual(client.calls[0][0], "audio.webm")

    def test_invalid_uploads_are_rejected_before_a_client_is_built(self) -> None:
        requested: list[str] = []

        def factory(model: str) -> _StubTranscriptionClient:
            requested.append(model)
            return _StubTranscriptionClient(Transcript(text="unused"))

        small = Settings(openai_api_key="test-key", transcription_max_bytes=4)
        for audio, content_type in [(b"data", "text/plain"), (b"", "audio/webm"), (b"too long", "audio/webm")]:
            with self.subTest(content_type=content_type, size=len(audio)):
                with self.assertRaises(InvalidInputError):
                    asyncio.run(
                        writing_assist.transcribe(
                            audio,
                            filename="a",
                            content_type=content_type,
                            client_factory=factory,
                            settings=small,
                        )
                    )

        self.assertEqual(requested, [])

    def test_slow_transcription_times_out(self) -> None:
        client = _StubTranscriptionClient(Transcript(text="late"), delay=0.5)
        settings = Settings(openai_api_key="test-key", transcription_timeout_seconds=0.05)

        with self.assertRaises(LLMTimeoutError):
            asyncio.run(
                writing_assist.transcribe(
                    b"x", filename="a.webm", content_type="audio/webm", client=client, settings=settings
                )
            )


class TranscriptionClientTests(unittest.TestCase):
    def test_multipart_body_carries_fields_and_file(self) -> None:
        body, content_type = encode_multipart(
            {"model": "whisper-1", "response_format": "json"},
            {"file": ("note.webm", "audio/webm", b"\x00\x01voice")},
        )

        boundary = content_type.split("boundary=", 1)[1]
        self.assertTrue(content_type.startswith("multipart/form-data; boundary="))
        self.assertIn(b'name="model"\r\n\r\nwhisper-1\r\n', body)
        self.assertIn(b'name="file"; filename="note.webm"\r\nContent-Type: audio/webm\r\n\r\n\x00\x01voice\r\n', body)
        self.assertTrue(body.endswith(f"--{boundary}--\r\n".encode("utf-8")))

    def test_missing_key_is_not_configured(self) -> None:
        with self.assertRaises(ProviderNotConfiguredError):
            get_transcription_client("whisper-1", settings=Settings(openai_api_key=None))

    def test_client_uses_transcription_settings(self) -> None:
        settings = Settings(openai_api_key="test-key", transcription_timeout_seconds=12)

        client = get_transcription_client(settings.transcription_model, settings=settings)

        self.assertEqual(client.model, "whisper-1")
        self.assertEqual(client.timeout_seconds, 12)


if __name__ == "__main__":
    unittest.main()
