"""
Configuration constants for the application.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).resolve().parent.parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

# Main Admin User ID - IMMUTABLE CONSTANT
# The user with this ID can create problems and promote others to co-admin.
MAIN_ADMIN_USER_ID = 1

# ======================================================
# 20-DAY CHALLENGE RULES
# ======================================================
# Fixed rules, not runtime-configurable.
TOTAL_DAYS = 20
DAILY_REQUIREMENTS = {
    "easy": 3,
    "medium": 1,
    "hard": 1,
}
MIN_SCORE_TO_PASS = 6
CHALLENGE_REWARD = 500_000  # display only (VND)

# Anti-cheat thresholds
MAX_PASTE_PERCENTAGE = 30  # max share of submitted code that may be pasted
MAX_TYPING_SPEED = 500     # chars per minute above this looks scripted

# "Today" is anchored to this IANA zone, never to the client clock.
CHALLENGE_DAY_TIMEZONE = os.getenv("CHALLENGE_DAY_TIMEZONE", "UTC").strip() or "UTC"

# What generate_day does when the catalog runs out of unused problems:
#   reuse        -> top up from problems used on earlier days
#   under_assign -> assign fewer problems than the quota
#   error        -> refuse to generate the day
EXHAUSTION_POLICIES = ("reuse", "under_assign", "error")


def load_exhaustion_policy() -> str:
    """Read CATALOG_EXHAUSTION_POLICY, refusing unknown values at startup."""
    policy = os.getenv("CATALOG_EXHAUSTION_POLICY", "reuse").strip().lower()
    if policy not in EXHAUSTION_POLICIES:
        raise RuntimeError(
            f"CATALOG_EXHAUSTION_POLICY must be one of {', '.join(EXHAUSTION_POLICIES)}, got {policy!r}"
        )
    return policy


CATALOG_EXHAUSTION_POLICY = load_exhaustion_policy()

# Shared secret for resetting a challenge. Empty disables reset entirely.
CHALLENGE_RESET_SECRET = os.getenv("CHALLENGE_RESET_SECRET", "")
KEEP_LOGS_ON_RESET = os.getenv("KEEP_LOGS_ON_RESET", "0") == "1"

# ======================================================
# SCORING ORACLE (OpenAI-compatible endpoint)
# ======================================================
# IMPORTANT: Do NOT hardcode keys in code or commit them to git.
GRADER_API_KEY = os.getenv("GRADER_API_KEY", os.getenv("OPENAI_API_KEY", ""))
GRADER_BASE_URL = os.getenv("GRADER_BASE_URL", "https://api.groq.com/openai/v1")
GRADER_MODEL = os.getenv("GRADER_MODEL", "llama-3.3-70b-versatile")
