"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


# Server
APP_TITLE: str = "Deepwoods AI Assistant"
WELCOME_MESSAGE: str = "Welcome to the Deepwoods AI Assistant!"
PORT: int = int(os.getenv("PORT", "").strip() or 3000)
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

# Scope value meaning "no document scope, answer from the web"
NO_SCOPE_SENTINEL: str = "general_discussion"

# Documents ingested by scripts/ingest.py, keyed by scope ref
DOCUMENT_SOURCES: dict[str, str] = {
    "fl-ghg-fy25": "https://greenpositive.org/wp-content/uploads/2025/08/Featherlite-Furniture-FL-GHG-Emissions-Report-FY25-V.2.0.pdf",
    "fl-ghg-inventory-2024": "https://greenpositive.org/wp-content/uploads/2025/08/Featherlite-GHG-Emissions-Inventory-Report-2024-Final-Version.pdf",
    "fy23-report": "https://greenpositive.org/wp-content/uploads/2025/08/Featherlite_FL_GHG-Emissions-Report-_FY23-Final-Version.pdf",
    "fl-sustainability-2025": "https://greenpositive.org/wp-content/uploads/2025/08/Featherlite-Sustainability-Report-2025.pdf",
    "fl-sdg-alignment-fy25": "https://greenpositive.org/wp-content/uploads/2025/08/Featherlite-SDGs-Alignment-Sustainability-Report-FY25.pdf",
    "deepwoods-green-profile-2025": "https://greenpositive.org/wp-content/uploads/2025/08/Sustainability-Communication-Deepwoods-Green-Profile-2025.pdf",
    "deepwoods-green-service-2025": "https://greenpositive.org/wp-content/uploads/2025/08/Deepwoods-Green-Service-Ppt-August-2025_Ver-2.pdf",
}

# Chunking (character counts, not tokens)
CHUNK_SIZE: int = 1000
CHUNK_OVERLAP: int = 200

# Milvus Cloud (from env)
MILVUS_URI: str = os.getenv("MILVUS_URI", "").strip()
MILVUS_TOKEN: str = os.getenv("MILVUS_TOKEN", "").strip()
COLLECTION_NAME: str = "documents"

# Hugging Face (embeddings / inference)
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()
HF_EMBED_MODEL: str = "sentence-transformers/all-MiniLM-L6-v2"
# Must match HF_EMBED_MODEL's output size
VECTOR_DIM: int = 384
EMBED_BATCH_SIZE: int = 32

# Retrieval
SEARCH_TOP_K: int = int(os.getenv("SEARCH_TOP_K", "").strip() or 4)
RETRIEVAL_MIN_SCORE: float | None = _env_float("RETRIEVAL_MIN_SCORE")

# OpenAI (answer LLM). When set, used instead of Hugging Face.
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)

# HF LLM (used when OPENAI_API_KEY is not set). Router chat completions require a chat model.
HF_CHAT_URL: str = "https://router.huggingface.co/v1/chat/completions"
HF_LLM_MODEL: str = (
    os.getenv("HF_LLM_MODEL", "meta-llama/Llama-3.2-3B-Instruct").strip()
    or "meta-llama/Llama-3.2-3B-Instruct"
)
LLM_MAX_TOKENS: int = 512

# Web search
WEB_SEARCH_PROVIDER: str = os.getenv("WEB_SEARCH_PROVIDER", "google").strip().lower() or "google"
GOOGLE_SEARCH_API_KEY: str = os.getenv("GOOGLE_SEARCH_API_KEY", "").strip()
GOOGLE_SEARCH_ENGINE_ID: str = os.getenv("GOOGLE_SEARCH_ENGINE_ID", "").strip()
GOOGLE_SEARCH_URL: str = "https://www.googleapis.com/customsearch/v1"
WEB_SEARCH_PAGES: int = int(os.getenv("WEB_SEARCH_PAGES", "").strip() or 1)
WEB_SEARCH_MAX_RESULTS: int = 10
WEB_SEARCH_PROVIDERS: tuple[str, ...] = ("google", "duckduckgo", "ddgs")

# Per-call timeouts (seconds); each is further capped by the request deadline
EMBED_API_TIMEOUT: float = 30.0
VECTOR_SEARCH_TIMEOUT: float = 15.0
LLM_API_TIMEOUT: float = 60.0
WEB_SEARCH_TIMEOUT: float = 15.0
PDF_FETCH_TIMEOUT: float = 60.0
VECTOR_INSERT_TIMEOUT: float = 30.0
REQUEST_DEADLINE_SECONDS: float = _env_float("REQUEST_DEADLINE_SECONDS") or 90.0

# Conversation sessions
SESSION_MAX_SESSIONS: int = int(os.getenv("SESSION_MAX_SESSIONS", "").strip() or 1000)
SESSION_TTL_SECONDS: float = _env_float("SESSION_TTL_SECONDS") or 3600.0
SESSION_MAX_TURNS: int = int(os.getenv("SESSION_MAX_TURNS", "").strip() or 20)
HISTORY_TURNS_IN_PROMPT: int = 6

# Behaviour flags
WEB_FALLBACK_ENABLED: bool = _env_flag("WEB_FALLBACK_ENABLED", True)
USE_CONVERSATION_HISTORY: bool = _env_flag("USE_CONVERSATION_HISTORY", True)
LOG_PROMPTS: bool = _env_flag("LOG_PROMPTS", False)
CHAT_ROUTE_ALIAS: bool = _env_flag("CHAT_ROUTE_ALIAS", True)
# pdfUrl that is an unconfigured http(s) URL: fetch and index it for that request only
ADHOC_PDF_ENABLED: bool = _env_flag("ADHOC_PDF_ENABLED", True)
DISCONNECT_POLL_SECONDS: float = 0.5

# User-facing messages
FALLBACK_DISCLAIMER: str = "⚠️ Note: No relevant docs found, so I searched the web."
NO_ANSWER_MESSAGE: str = "I could not find a relevant answer in your documents or on the internet."
NO_WEB_ANSWER_MESSAGE: str = "I could not find a relevant answer on the internet."
NO_DOCUMENT_ANSWER_MESSAGE: str = "I could not find a relevant answer in your documents."
MISSING_QUESTION_MESSAGE: str = "Missing question"
GENERIC_ERROR_MESSAGE: str = "An error occurred."
