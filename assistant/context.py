from typing import Iterable, Optional, Sequence, Set

from .models import ConversationTurn, TurnContext


def resolve_active_ids(history: Sequence[ConversationTurn]) -> Set[str]:
    """Product ids from the most recent turn that carries a non-empty context.

    History is scanned newest to oldest. Nothing is kept server-side: the
    client resends the history, so the active set is rebuilt on every call.
    """
    for turn in reversed(list(history or [])):
        ctx = turn.context
        if ctx is not None and ctx.last_product_ids:
            return set(ctx.last_product_ids)
    return set()


def build_context(product_ids: Iterable[str]) -> Optional[TurnContext]:
    ids = list(product_ids or [])
    if not ids:
        return None
    return TurnContext(last_product_ids=ids)


def latest_user_text(history: Sequence[ConversationTurn]) -> str:
    for turn in reversed(list(history or [])):
        if turn.role == "user" and turn.text.strip():
            return turn.text
    return ""
