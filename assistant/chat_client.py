import logging
from typing import List, Optional

import requests

from .catalog import Catalog
from .context import build_context
from .models import ConversationTurn, ResolutionResult
from .pipeline import ChatPipeline, build_local_pipeline
from .service_faq import GENERIC_REPLY
from .utils import get_logger, log_event


logger = get_logger("client")

DEFAULT_TIMEOUT = 20.0
HISTORY_LIMIT = 8


class ChatClient:
    """Conversation against a remote /api/chat with an offline fallback.

    Keeps the running history (including the context the server hands back)
    and answers through the local pipeline when the server is unreachable,
    errors, or replies with something that is not JSON.
    """

    def __init__(
        self,
        base_url: str,
        catalog: Catalog,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        local: Optional[ChatPipeline] = None,
    ):
        self.url = base_url.rstrip("/") + "/api/chat"
        self.session = session or requests.Session()
        self.timeout = timeout
        self.local = local or build_local_pipeline(catalog)
        self.history: List[ConversationTurn] = []

    def send(self, message: str) -> ResolutionResult:
        text = (message or "").strip()
        if not text:
            raise ValueError("message must not be empty")
        prior = self.history[-HISTORY_LIMIT:]
        result = self._remote(text, prior)
        if result is None:
            result = self.local.respond(text, prior)
        elif result.source == "faq" or result.reply.strip().lower() == GENERIC_REPLY.lower():
            # The server fell through to its stock answer; the local catalog may still know.
            local = self.local.resolver.recheck(text)
            if local is not None:
                result = local
        self._remember(text, result)
        return result

    def reset(self) -> None:
        self.history = []

    def _remote(self, text: str, prior: List[ConversationTurn]) -> Optional[ResolutionResult]:
        payload = {
            "message": text,
            "history": [t.model_dump(by_alias=True, exclude_none=True) for t in prior],
        }
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            log_event(logger, "remote_unreachable", logging.WARNING, error=e.__class__.__name__)
            return None
        if not resp.ok:
            log_event(logger, "remote_error", logging.WARNING, status=resp.status_code)
            return None
        try:
            body = resp.json()
        except ValueError:
            log_event(logger, "remote_bad_body", logging.WARNING)
            return None
        if not isinstance(body, dict):
            return None
        reply = body.get("reply") or body.get("text") or body.get("message") or ""
        source = body.get("source") if body.get("source") in ("products", "clarify", "faq", "gemini", "fallback_error") else "faq"
        ctx = body.get("context")
        ids = ctx.get("lastProductIds") if isinstance(ctx, dict) else None
        ids = [str(i) for i in ids] if isinstance(ids, list) else []
        return ResolutionResult(reply=str(reply) or GENERIC_REPLY, source=source, matched_product_ids=ids)

    def _remember(self, text: str, result: ResolutionResult) -> None:
        self.history.append(ConversationTurn(role="user", text=text))
        self.history.append(
            ConversationTurn(role="assistant", text=result.reply, context=build_context(result.matched_product_ids))
        )
