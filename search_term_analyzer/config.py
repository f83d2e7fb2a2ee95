"""Environment settings and Anthropic client construction."""

import os

import anthropic
from dotenv import load_dotenv

from .errors import ConfigError

load_dotenv()

DEFAULT_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_TIMEOUT = 300.0


def model_name() -> str:
    return os.getenv("ANALYZER_MODEL") or DEFAULT_MODEL


def request_timeout() -> float:
    raw = os.getenv("ANALYZER_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"ANALYZER_TIMEOUT must be a number of seconds, got {raw!r}.")


def api_key() -> str:
    key = os.getenv("ANTHROPIC_API_KEY")
    if not key:
        raise ConfigError("ANTHROPIC_API_KEY not set.")
    return key


def make_client() -> anthropic.Anthropic:
    """Synchronous client for the one-shot context call. No retries."""
    return anthropic.Anthropic(api_key=api_key(), timeout=request_timeout(), max_retries=0)


def make_async_client() -> anthropic.AsyncAnthropic:
    """Async client for the streaming classification call. No retries."""
    return anthropic.AsyncAnthropic(api_key=api_key(), timeout=request_timeout(), max_retries=0)
