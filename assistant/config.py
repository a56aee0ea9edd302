import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the chat service."""
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: Optional[str] = None
    llm_provider: str = ""
    llm_timeout_seconds: float = 15.0
    llm_temperature: float = 0.3
    llm_max_output_tokens: int = 400
    llm_max_reply_chars: int = 2000
    history_turns: int = 8
    list_display_limit: int = 6
    max_message_chars: int = 1000
    catalog_path: Path = BASE_DIR / "data" / "products.json"
    faq_path: Optional[Path] = None
    prompt_path: Optional[Path] = None
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @property
    def provider(self) -> Optional[str]:
        """Name of the generative provider to use, or None when no key is set."""
        wanted = (self.llm_provider or "").strip().lower()
        if wanted == "gemini":
            return "gemini" if self.gemini_api_key else None
        if wanted == "openai":
            return "openai" if self.openai_api_key else None
        if self.gemini_api_key:
            return "gemini"
        if self.openai_api_key:
            return "openai"
        return None

    @property
    def generative_enabled(self) -> bool:
        return self.provider is not None


def _optional_path(value: Optional[str]) -> Optional[Path]:
    if not value:
        return None
    return Path(value)


def load_settings() -> Settings:
    """Build Settings from the environment (and a local .env file, if any).

    Missing API keys are fine: the service then runs catalog/FAQ-only.
    Malformed numeric values raise ValueError so a bad deploy fails fast.
    """
    load_dotenv()
    catalog_path = os.getenv("CATALOG_PATH")
    origins = [o.strip() for o in os.getenv("APP_ORIGIN", "*").split(",") if o.strip()]
    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        gemini_api_base=os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_model=os.getenv("OPENAI_MODEL_NAME", "gpt-4o-mini"),
        openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
        llm_provider=os.getenv("LLM_PROVIDER", ""),
        llm_timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "15")),
        llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0.3")),
        llm_max_output_tokens=int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "400")),
        llm_max_reply_chars=int(os.getenv("LLM_MAX_REPLY_CHARS", "2000")),
        history_turns=int(os.getenv("CHAT_HISTORY_TURNS", "8")),
        list_display_limit=int(os.getenv("CHAT_LIST_LIMIT", "6")),
        max_message_chars=int(os.getenv("CHAT_MAX_MESSAGE_CHARS", "1000")),
        catalog_path=Path(catalog_path) if catalog_path else BASE_DIR / "data" / "products.json",
        faq_path=_optional_path(os.getenv("FAQ_PATH")),
        prompt_path=_optional_path(os.getenv("PROMPT_PATH")),
        allowed_origins=origins or ["*"],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
