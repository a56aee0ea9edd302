import json
import re
from pathlib import Path
from typing import List, Optional, Union

from rapidfuzz import fuzz, process

from .models import FAQItem
from .utils import get_logger, log_event, normalize_text


logger = get_logger("faq")

GENERIC_REPLY = "I can help with products, warranty, delivery and payments."

FUZZY_CUTOFF = 85
FUZZY_MIN_TOKEN = 4

DEFAULT_FAQ: List[FAQItem] = [
    FAQItem(
        id="warranty",
        keywords=["warranty", "guarantee"],
        answer="Most items include 6 months – 1 year warranty depending on brand. Ask for a specific product for exact warranty.",
    ),
    FAQItem(
        id="delivery",
        keywords=["delivery", "shipping", "deliver", "dispatch"],
        answer="Delivery is usually 3–7 days depending on your location. Tracking provided post dispatch.",
    ),
    FAQItem(
        id="returns",
        keywords=["return", "refund", "replace"],
        answer="Returns accepted within 7 days if item is unused and in original packaging.",
    ),
    FAQItem(
        id="earbuds",
        keywords=["earbud", "tws", "earphone"],
        answer='Popular earbud brands here: boAt, Noise, Tribit. Try "show me boAt".',
    ),
    FAQItem(
        id="phones",
        keywords=["phone", "mobile", "smartphone"],
        answer='We stock phones from Apple, Samsung, OnePlus and Redmi. Try "show me Samsung" or "price of iPhone 17 Pro".',
    ),
    FAQItem(
        id="payments",
        keywords=["payment", "upi", "cash on delivery", "cod", "emi"],
        answer="You can pay by UPI, debit/credit card or cash on delivery. Add your UPI reference at checkout when paying by UPI.",
    ),
]


def _keyword_hit(keyword: str, text: str) -> bool:
    # Keywords match at a word start: "phone" hits "phones" but not "headphones".
    return re.search(r"\b" + re.escape(keyword.lower()), text) is not None


def load_faq(path: Optional[Union[str, Path]] = None) -> List[FAQItem]:
    """Load FAQ rules from a JSON file, falling back to the built-in table."""
    if not path:
        return list(DEFAULT_FAQ)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        items = [FAQItem(**item) for item in data]
    except Exception as e:
        log_event(logger, "faq_load_failed", path=str(path), error=str(e))
        return list(DEFAULT_FAQ)
    return items or list(DEFAULT_FAQ)


class FAQ:
    """Static keyword FAQ: the last tier, which always has an answer."""

    def __init__(self, items: Optional[List[FAQItem]] = None):
        self.items = list(items) if items is not None else list(DEFAULT_FAQ)

    def find(self, user_text: str) -> Optional[FAQItem]:
        t = normalize_text(user_text)
        if not t:
            return None
        for item in self.items:
            if any(_keyword_hit(kw, t) for kw in item.keywords):
                return item
        # Typo pass: compare single message tokens against single-word keywords.
        vocab = {}
        for item in self.items:
            for kw in item.keywords:
                if " " not in kw:
                    vocab.setdefault(kw.lower(), item)
        if not vocab:
            return None
        for token in t.split(" "):
            if len(token) < FUZZY_MIN_TOKEN:
                continue
            match = process.extractOne(token, list(vocab), scorer=fuzz.ratio, score_cutoff=FUZZY_CUTOFF)
            if match:
                return vocab[match[0]]
        return None

    def answer(self, user_text: str) -> str:
        item = self.find(user_text)
        return item.answer if item else GENERIC_REPLY


def find_faq_answer(user_text: str, faq: Optional[FAQ] = None) -> str:
    return (faq or FAQ()).answer(user_text)
