"""
Central configuration for extraction limits, provider defaults and the
environment variables read by the CLI.

All values are constants and should be imported where needed (no runtime
logic here).  Template cell coordinates are part of the template contract
and live in ``writers/plan_sheet.py``.
"""

from __future__ import annotations


# Character ceilings applied right after extraction.
BOOK_MAX_CHARS = 300_000
JUSTIFICATION_MAX_CHARS = 200_000

# Second bound applied to each document section when the prompt is built.
PROMPT_SECTION_MAX_CHARS = 200_000

# Generation parameters shared by every provider.
GENERATION_TEMPERATURE = 0.3
GEMINI_MAX_OUTPUT_TOKENS = 65_536
OPENAI_MAX_OUTPUT_TOKENS = 16_384
CLAUDE_MAX_OUTPUT_TOKENS = 16_384

# Model used for generation when the session has not recorded one.
GEMINI_DEFAULT_MODEL = "gemini-2.0-flash-lite"
OPENAI_DEFAULT_MODEL = "gpt-4o"
CLAUDE_DEFAULT_MODEL = "claude-opus-4-6"

# Models probed, in order, when verifying an API key.
GEMINI_CANDIDATE_MODELS = (
    "gemini-2.5-flash",
    "gemini-2.5-flash-lite",
    "gemini-2.0-flash-lite",
    "gemini-2.0-flash",
)
OPENAI_CANDIDATE_MODELS = ("gpt-4o-mini",)
CLAUDE_CANDIDATE_MODELS = (CLAUDE_DEFAULT_MODEL,)

PING_PROMPT = "Di OK"

DEFAULT_PROVIDER = "gemini"
DEFAULT_GROUP = "A-B-C"

# Environment variables (a .env file is honoured by the CLI).
ENV_PROVIDER = "PLANNER_AI_PROVIDER"
ENV_API_KEY = "PLANNER_API_KEY"
ENV_SESSION_FILE = "PLANNER_SESSION_FILE"

DEFAULT_SESSION_FILE = ".planner_session.json"
