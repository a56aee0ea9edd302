import re
from typing import Iterable, Optional

from .models import Intent
from .utils import normalize_text


LIST_RE = re.compile(r"\b(show me|show|list|find|display)\b")
PRICE_RE = re.compile(r"\b(prices?|pricing|costs?|how much|rate)\b")
WARRANTY_RE = re.compile(r"\b(warrant\w*|guarantee\w*)")
DETAILS_RE = re.compile(r"\b(details?|specs?|specifications?|about|describe|description)\b")

# Words removed before a message is used as a catalog query.
LIST_CUES = {"show", "list", "find", "display"}
PRICE_CUES = {"price", "prices", "pricing", "cost", "costs", "much", "rate"}
WARRANTY_CUES = {"warranty", "warrant", "warranties", "guarantee", "guaranteed"}
DETAIL_CUES = {"details", "detail", "specs", "spec", "specification", "specifications", "about", "describe", "description"}
FILLER_WORDS = {
    "a", "an", "the", "of", "for", "on", "in", "me", "my", "is", "are", "its", "it's", "this", "that",
    "these", "those", "them", "it", "what", "what's", "what’s", "whats", "how", "does", "do", "you", "have",
    "please", "pls", "tell", "give", "can", "i", "get", "all", "any", "some", "and", "with", "to",
    # Pointers back at the products already on screen.
    "one", "ones", "which", "item", "items", "product", "products", "both", "they", "their",
}
CUES_BY_INTENT = {
    "list": LIST_CUES,
    "price": PRICE_CUES,
    "warranty": WARRANTY_CUES,
    "details": DETAIL_CUES,
}

_PUNCT_RE = re.compile(r"[?!.,;:\"()\[\]]+")

SHORT_MESSAGE_TOKENS = 3


def strip_punctuation(text: str) -> str:
    return normalize_text(_PUNCT_RE.sub(" ", text or ""))


def extract_query(text: str, drop: Iterable[str] = ()) -> str:
    """Turn a chat message into a catalog query.

    Punctuation goes, then every token found in `drop` or in the filler list.
    """
    dropped = set(drop) | FILLER_WORDS
    tokens = [t for t in strip_punctuation(text).split(" ") if t and t not in dropped]
    return " ".join(tokens)


def classify(text: str, catalog=None) -> Intent:
    """Map a message to an intent with ordered rules; first match wins.

    The short-message rule only applies when a catalog is supplied: a bare
    brand or product name of up to three words is read as a list request.
    """
    t = normalize_text(text)
    if not t:
        return "general"
    if LIST_RE.search(t):
        return "list"
    if PRICE_RE.search(t):
        return "price"
    if WARRANTY_RE.search(t):
        return "warranty"
    if DETAILS_RE.search(t):
        return "details"
    if catalog is not None and len(t.split(" ")) <= SHORT_MESSAGE_TOKENS:
        if catalog.search(strip_punctuation(t)):
            return "list"
    return "general"


def cue_words(intent: Optional[str]) -> set:
    return CUES_BY_INTENT.get(intent or "", set())
