"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL: str = (os.getenv("LOG_LEVEL", "INFO").strip() or "INFO").upper()

# OpenAI (planner + answering model)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)

# Research tool backends (from env)
TAVILY_API_KEY: str = os.getenv("TAVILY_API_KEY", "").strip()
SERPER_API_KEY: str = os.getenv("SERPER_API_KEY", "").strip()
# Optional: the Jina reader works without a key but is rate limited
JINA_API_KEY: str = os.getenv("JINA_API_KEY", "").strip()

TAVILY_SEARCH_URL: str = "https://api.tavily.com/search"
JINA_READER_URL: str = "https://r.jina.ai/"
SERPER_VIDEOS_URL: str = "https://google.serper.dev/videos"

# API timeouts (seconds)
LLM_API_TIMEOUT: float = 60.0
TOOLS_HTTP_TIMEOUT: float = 15.0

# Planner limits
MAX_PLAN_STEPS: int = 6
MAX_TOOL_INVOCATIONS: int = 6

# Tool defaults
SEARCH_DEFAULT_MAX_RESULTS: int = 10
# Tavily returns at most 20 results; larger planned values are clamped
SEARCH_MAX_RESULTS_LIMIT: int = 20
SEARCH_DEFAULT_DEPTH: str = "basic"
VIDEO_DEFAULT_MAX_RESULTS: int = 10

# Execution summary (items per step and snippet lengths in characters)
SUMMARY_MAX_ITEMS: int = 3
SEARCH_SNIPPET_LENGTH: int = 160
RETRIEVE_SNIPPET_LENGTH: int = 200
VIDEO_SNIPPET_LENGTH: int = 160

# Answering model
ANSWER_MAX_TOKENS: int = 1024

# Conversation history kept per session (oldest messages are dropped first)
SESSION_MAX_MESSAGES: int = 40
