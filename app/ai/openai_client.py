"""
Unified client for the grading model (any OpenAI-compatible endpoint).

All modules that need the model should import from here:
    from app.ai.openai_client import get_client, key_present, get_last_error

This ensures:
- The API key is read ONCE and stripped of whitespace.
- A single client instance is reused.
"""
import openai

from app.core.config import GRADER_API_KEY, GRADER_BASE_URL

_KEY: str = GRADER_API_KEY.strip()

# Track last error for diagnostics
_last_error: str | None = None

# Lazily-created singleton
_client = None


def key_present() -> bool:
    return bool(_KEY)


def key_fingerprint() -> str:
    """Return masked key for safe logging: gsk_xx...1234"""
    if not _KEY:
        return "(not set)"
    if len(_KEY) <= 10:
        return _KEY[:2] + "***"
    return _KEY[:6] + "..." + _KEY[-4:]


def get_client():
    """
    Return the shared client, or None if the key is missing.
    """
    global _client
    if not _KEY:
        return None
    if _client is None:
        _client = openai.OpenAI(api_key=_KEY, base_url=GRADER_BASE_URL, timeout=30)
    return _client


def set_last_error(msg: str):
    global _last_error
    _last_error = msg


def get_last_error() -> str | None:
    return _last_error


def log_startup():
    """Print one-time startup diagnostics."""
    print(f"[AI] grader key present: {key_present()}", flush=True)
    print(f"[AI] key fingerprint: {key_fingerprint()}", flush=True)
    print(f"[AI] grader endpoint: {GRADER_BASE_URL}", flush=True)
