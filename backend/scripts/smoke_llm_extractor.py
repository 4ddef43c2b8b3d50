"""Run a real extraction call against a small in-memory conversation.

Usage (from repo root):
    python backend/scripts/smoke_llm_extractor.py [--kind onboarding|log_composer]

Usage (from backend/):
    python scripts/smoke_llm_extractor.py
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.config import get_settings
from app.conversation.client import get_chat_client
from app.conversation.session import ConversationSession, SessionKind
from app.services.conversations import default_extractor, model_for

_DEMO_HISTORY: dict[SessionKind, list[dict[str, str]]] = {
    SessionKind.ONBOARDING: [
        {"role": "assistant", "content": "What's your background, and what would you like to achieve with AI?"},
        {"role": "user", "content": "I'm a backend developer at a logistics company, decent at Python."},
        {"role": "assistant", "content": "How much time can you give this each day?"},
        {"role": "user", "content": "About an hour on weekdays, more on weekends. I want to build RAG tools."},
    ],
    SessionKind.LOG_COMPOSER: [
        {"role": "assistant", "content": "What did you work on today?"},
        {"role": "user", "content": "Built a small retrieval pipeline with pgvector and OpenAI embeddings."},
        {"role": "assistant", "content": "Nice! How long did it take and how did it feel?"},
        {"role": "user", "content": "Around 90 minutes. Frustrating at first, then really satisfying."},
    ],
}


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--kind", choices=[kind.value for kind in SessionKind], default=SessionKind.LOG_COMPOSER.value)
    args = parser.parse_args()

    kind = SessionKind(args.kind)
    settings = get_settings()
    extractor = default_extractor(kind, get_chat_client(model_for(kind, settings), settings=settings), settings)
    session = ConversationSession.from_history("smoke-extractor", kind, _DEMO_HISTORY[kind])
    result = asyncio.run(extractor.extract(session))
    print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
