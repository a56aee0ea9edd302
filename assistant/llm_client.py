import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import requests
from openai import OpenAI, OpenAIError

from .config import Settings
from .errors import BackendError
from .models import ConversationTurn
from .utils import get_logger, log_event


logger = get_logger("llm")

PARSE_SENTINEL = "Sorry, I couldn't parse the assistant's reply."

SYSTEM_PROMPT = (
    "You are 'DigitGenius AI Assistant', the shopping helper of an Indian electronics store "
    "selling phones, tablets, earbuds, headphones and speakers. "
    "Answer in short, friendly English. Prices are in Indian rupees (₹).\n"
    "RULES\n"
    "- Only mention products (brand + model) that appear in CATALOG_CONTEXT. Never invent models, prices or warranties.\n"
    "- If CATALOG_CONTEXT is empty or does not cover the question, say so and suggest asking e.g. 'show me Samsung'.\n"
    "- For store policies use these facts: delivery 3–7 days with tracking after dispatch; returns within 7 days if unused "
    "and in original packaging; payment by UPI, card or cash on delivery.\n"
    "- Do NOT include URLs.\n"
    "- Keep replies under 120 words; use a short bullet list when naming several products.\n"
)


def load_system_prompt(path: Optional[Union[str, Path]] = None) -> str:
    if path:
        try:
            p = Path(path)
            if p.exists():
                return p.read_text(encoding="utf-8")
        except OSError as e:
            log_event(logger, "prompt_load_failed", path=str(path), error=str(e))
    return SYSTEM_PROMPT


def redact_pii(text: str) -> str:
    t = text or ""
    t = re.sub(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}", "[redacted-email]", t)
    t = re.sub(r"(?<!\d)(?:\+?91[- ]?)?[6-9]\d{4}[- ]?\d{5}(?!\d)", "[redacted-phone]", t)
    return t


def bounded_history(history: Sequence[ConversationTurn], user_message: str, max_turns: int = 8) -> List[Dict[str, str]]:
    """Last `max_turns` non-empty turns followed by the current user message.

    Clients differ on whether the current message is already the last
    history entry; it is never sent twice.
    """
    turns = [t for t in (history or []) if (t.text or "").strip()]
    if turns and turns[-1].role == "user" and turns[-1].text.strip() == (user_message or "").strip():
        turns = turns[:-1]
    out: List[Dict[str, str]] = []
    for t in turns[-max_turns:] if max_turns > 0 else []:
        text = redact_pii(t.text) if t.role == "user" else t.text
        out.append({"role": t.role, "text": text})
    out.append({"role": "user", "text": redact_pii(user_message)})
    return out


# Response shapes, tried in order. Each returns None when the shape does not apply.

def _join(texts: List[Any]) -> Optional[str]:
    joined = "".join(t for t in texts if isinstance(t, str))
    return joined or None


def _from_candidates(data: Dict[str, Any]) -> Optional[str]:
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return _join([p.get("text") or p.get("string_value") for p in parts if isinstance(p, dict)])


def _from_content_array(data: Dict[str, Any]) -> Optional[str]:
    content = data.get("content")
    if not isinstance(content, list):
        return None
    return _join([b.get("text") for b in content if isinstance(b, dict)])


def _from_output_array(data: Dict[str, Any]) -> Optional[str]:
    output = data.get("output")
    if not isinstance(output, list):
        return None
    texts: List[Any] = []
    for item in output:
        if not isinstance(item, dict):
            continue
        for block in item.get("content") or []:
            if isinstance(block, dict) and block.get("type") in (None, "output_text", "text"):
                texts.append(block.get("text"))
    return _join(texts)


def _from_output_text(data: Dict[str, Any]) -> Optional[str]:
    value = data.get("output_text")
    if isinstance(value, list):
        return _join(value)
    return value if isinstance(value, str) and value else None


def _from_choices(data: Dict[str, Any]) -> Optional[str]:
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) and content else None


RESPONSE_DECODERS: List[Callable[[Dict[str, Any]], Optional[str]]] = [
    _from_candidates,
    _from_content_array,
    _from_output_array,
    _from_output_text,
    _from_choices,
]


def extract_reply_text(data: Any) -> str:
    """Normalize a provider response body to plain text; never raises."""
    if isinstance(data, list):
        pieces = [extract_reply_text(d) for d in data if isinstance(d, dict)]
        pieces = [p for p in pieces if p != PARSE_SENTINEL]
        return "".join(pieces) if pieces else PARSE_SENTINEL
    if not isinstance(data, dict):
        return PARSE_SENTINEL
    for decode in RESPONSE_DECODERS:
        try:
            text = decode(data)
        except (AttributeError, TypeError):
            text = None
        if text and text.strip():
            return text.strip()
    return PARSE_SENTINEL


class GenerativeBackend:
    """Single-attempt completion against a remote model.

    Transport failures raise BackendError; a reply that cannot be decoded
    comes back as PARSE_SENTINEL.
    """

    name = "generative"

    def __init__(self, settings: Settings):
        self.settings = settings
        self.max_turns = settings.history_turns
        self.max_reply_chars = settings.llm_max_reply_chars

    def complete(
        self,
        system_prompt: str,
        history: Sequence[ConversationTurn],
        user_message: str,
        catalog_context: str = "",
    ) -> str:
        system = system_prompt
        if catalog_context:
            system = f"{system_prompt}\n\nCATALOG_CONTEXT:\n{catalog_context}"
        turns = bounded_history(history, user_message, self.max_turns)
        data = self._send(system, turns)
        text = extract_reply_text(data)
        if text == PARSE_SENTINEL:
            log_event(logger, "backend_unparsable", backend=self.name)
            return text
        return text[: self.max_reply_chars].rstrip()

    def _send(self, system: str, turns: List[Dict[str, str]]) -> Any:
        raise NotImplementedError


class GeminiBackend(GenerativeBackend):
    name = "gemini"

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        super().__init__(settings)
        # None means a plain requests.post per call; the chat route runs in a thread pool.
        self.session = session

    @property
    def url(self) -> str:
        base = self.settings.gemini_api_base.rstrip("/")
        return f"{base}/models/{self.settings.gemini_model}:generateContent"

    def build_payload(self, system: str, turns: List[Dict[str, str]]) -> Dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [
                {"role": "model" if t["role"] == "assistant" else "user", "parts": [{"text": t["text"]}]}
                for t in turns
            ],
            "generationConfig": {
                "temperature": self.settings.llm_temperature,
                "maxOutputTokens": self.settings.llm_max_output_tokens,
            },
        }

    def _send(self, system: str, turns: List[Dict[str, str]]) -> Any:
        try:
            post = self.session.post if self.session is not None else requests.post
            resp = post(
                self.url,
                params={"key": self.settings.gemini_api_key},
                json=self.build_payload(system, turns),
                timeout=self.settings.llm_timeout_seconds,
            )
        except requests.RequestException as e:
            raise BackendError(f"gemini request failed: {e.__class__.__name__}") from e
        if not 200 <= resp.status_code < 300:
            raise BackendError(f"gemini returned HTTP {resp.status_code}", status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError:
            return None


class OpenAIBackend(GenerativeBackend):
    """OpenAI-compatible Responses endpoint through the official SDK."""

    name = "openai"

    def __init__(self, settings: Settings, client: Optional[OpenAI] = None):
        super().__init__(settings)
        self.client = client or OpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.llm_timeout_seconds,
            max_retries=0,
        )

    def _send(self, system: str, turns: List[Dict[str, str]]) -> Any:
        try:
            resp = self.client.responses.create(
                model=self.settings.openai_model,
                instructions=system,
                input=[{"role": t["role"], "content": t["text"]} for t in turns],
                temperature=self.settings.llm_temperature,
                max_output_tokens=self.settings.llm_max_output_tokens,
            )
        except OpenAIError as e:
            raise BackendError(f"openai request failed: {e.__class__.__name__}") from e
        dump = getattr(resp, "model_dump", None)
        return dump() if callable(dump) else resp


def build_backend(settings: Settings) -> Optional[GenerativeBackend]:
    """Backend for the configured provider, or None in catalog/FAQ-only mode."""
    provider = settings.provider
    if provider == "gemini":
        return GeminiBackend(settings)
    if provider == "openai":
        return OpenAIBackend(settings)
    return None
