"""System instructions and greetings for the assistants."""

from __future__ import annotations

import random
from functools import lru_cache
from pathlib import Path

from app.conversation.errors import ConversationError
from app.conversation.session import SessionKind

_PROMPT_DIR = Path(__file__).resolve().parent / "prompts"

ONBOARDING_GREETING = (
    "Hi! I'm excited to help you create your personalized AI learning plan. "
    "Let's start with the basics - what's your background, and what would you like "
    "to achieve with AI? Feel free to share as much or as little as you'd like!"
)

LOG_COMPOSER_GREETINGS: tuple[str, ...] = (
    "Hi there! 👋 I'm excited to help you capture today's AI learning journey. What did you work on today?",
    "Hello! 🚀 Ready to document your #100DaysOfAI progress? Tell me about your latest discoveries!",
    "Hey! ✨ I'm here to help you create an amazing log entry. What's the highlight of your AI learning today?",
    "Welcome back! Let's capture your AI journey progress. What did you explore or build today?",
    "Hi! 🌟 I'd love to hear about your AI adventures today. What new things did you learn or create?",
    "Hello there! 💡 Ready to document your learning? What's the most interesting thing you worked on today?",
    "Hey! 🎉 Let's create a great log entry together. What did you accomplish in your AI journey today?",
    "Hi! 🔥 I'm here to help you reflect on your AI learning. What did you dive into today?",
    "Welcome! ⚡ Let's capture your progress. What did you learn or build in your AI journey today?",
    "Hello! 🎨 I'm excited to help you document your AI learning. What's the story of your day?",
)

_CONVERSATION_PROMPTS: dict[SessionKind, str] = {
    SessionKind.ONBOARDING: "onboarding_coach",
    SessionKind.LOG_COMPOSER: "log_composer",
}


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Read a prompt template from the prompts directory."""

    prompt_file = _PROMPT_DIR / f"{name}.txt"
    try:
        prompt_text = prompt_file.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ConversationError(f"Failed to load prompt file: {prompt_file}") from exc
    if not prompt_text:
        raise ConversationError(f"Prompt file is empty: {prompt_file}")
    return prompt_text


def conversation_prompt(kind: SessionKind) -> str:
    return load_prompt(_CONVERSATION_PROMPTS[kind])


def greeting_for(kind: SessionKind, *, rng: random.Random | None = None) -> str:
    if kind is SessionKind.ONBOARDING:
        return ONBOARDING_GREETING
    return (rng or random).choice(LOG_COMPOSER_GREETINGS)
