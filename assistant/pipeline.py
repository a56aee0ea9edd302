import logging
from typing import Optional, Sequence

from .catalog import Catalog
from .context import resolve_active_ids
from .errors import BackendError
from .intents import classify
from .llm_client import PARSE_SENTINEL, SYSTEM_PROMPT, GenerativeBackend
from .models import ConversationTurn, ResolutionResult
from .resolver import DEFAULT_DISPLAY_LIMIT, CatalogResolver
from .service_faq import FAQ, GENERIC_REPLY
from .utils import get_logger, log_event


logger = get_logger("pipeline")

DEFAULT_MAX_MESSAGE_CHARS = 1000


def is_confident(reply: Optional[str]) -> bool:
    """A generative reply is usable unless empty, unparsable or the stock answer."""
    text = (reply or "").strip()
    if not text:
        return False
    if text == PARSE_SENTINEL:
        return False
    return text.lower() != GENERIC_REPLY.lower()


class ChatPipeline:
    """Tiered resolution: catalog, then the generative backend, then the FAQ.

    The first confident tier answers. Failures in any tier are logged and
    the next tier runs, so `respond` always returns a reply.
    """

    def __init__(
        self,
        catalog: Catalog,
        backend: Optional[GenerativeBackend] = None,
        faq: Optional[FAQ] = None,
        system_prompt: str = SYSTEM_PROMPT,
        display_limit: int = DEFAULT_DISPLAY_LIMIT,
        max_message_chars: int = DEFAULT_MAX_MESSAGE_CHARS,
    ):
        self.catalog = catalog
        self.resolver = CatalogResolver(catalog, display_limit=display_limit)
        self.backend = backend
        self.faq = faq or FAQ()
        self.system_prompt = system_prompt
        self.max_message_chars = max_message_chars

    def respond(self, message: str, history: Sequence[ConversationTurn] = ()) -> ResolutionResult:
        text = (message or "").strip()[: self.max_message_chars]
        history = list(history or [])
        active_ids = resolve_active_ids(history)

        result = self._catalog_attempt(text, active_ids)
        if result is not None:
            return result

        if self.backend is None:
            return self._faq_respond(text)

        reply = self._generative_attempt(text, history, active_ids)
        if is_confident(reply):
            return ResolutionResult(reply=reply, source="gemini")

        result = self._recheck(text)
        if result is not None:
            return result
        return self._faq_respond(text)

    def _catalog_attempt(self, text: str, active_ids) -> Optional[ResolutionResult]:
        try:
            intent = classify(text, self.catalog)
            return self.resolver.resolve(intent, text, active_ids)
        except Exception as e:
            log_event(logger, "catalog_tier_failed", logging.ERROR, error=repr(e))
            return None

    def _generative_attempt(self, text: str, history, active_ids) -> Optional[str]:
        try:
            catalog_context = self.resolver.catalog_context(text, active_ids)
            return self.backend.complete(self.system_prompt, history, text, catalog_context)
        except BackendError as e:
            log_event(logger, "generative_tier_failed", logging.WARNING, error=str(e), status=e.status_code)
        except Exception as e:
            log_event(logger, "generative_tier_failed", logging.ERROR, error=repr(e))
        return None

    def _recheck(self, text: str) -> Optional[ResolutionResult]:
        try:
            return self.resolver.recheck(text)
        except Exception as e:
            log_event(logger, "catalog_recheck_failed", logging.ERROR, error=repr(e))
            return None

    def _faq_respond(self, text: str) -> ResolutionResult:
        try:
            reply = self.faq.answer(text)
        except Exception as e:
            log_event(logger, "faq_tier_failed", logging.ERROR, error=repr(e))
            reply = GENERIC_REPLY
        return ResolutionResult(reply=reply, source="faq")


def build_local_pipeline(catalog: Catalog, faq: Optional[FAQ] = None, display_limit: int = DEFAULT_DISPLAY_LIMIT) -> ChatPipeline:
    """Offline variant: same tiers with no generative backend."""
    return ChatPipeline(catalog, backend=None, faq=faq, display_limit=display_limit)
