from typing import Iterable, List, Optional, Set

from .catalog import Catalog
from .intents import cue_words, extract_query
from .models import ProductRecord, ResolutionResult
from .utils import format_price

CLARIFY_REPLY = (
    "Which product or brand do you mean? Try 'show me Samsung' first, "
    "or name the product, e.g. 'price of Galaxy Tab S10'."
)
LIST_HINT = 'You can ask "price", "warranty" or "details" about these items.'
DEFAULT_DISPLAY_LIMIT = 6
CONTEXT_PRODUCT_LIMIT = 5
WINDOW_MAX_TOKENS = 12
WINDOW_MIN_CHARS = 3


def _more_suffix(total: int, limit: int) -> List[str]:
    if total > limit:
        return [f"...and {total - limit} more."]
    return []


def format_list(products: List[ProductRecord], limit: int = DEFAULT_DISPLAY_LIMIT) -> str:
    lines = [f"Found {len(products)} product(s):"]
    for i, p in enumerate(products[:limit], start=1):
        lines.append(f"{i}. {p.brand} {p.name} — ₹{format_price(p.price)} (Warranty: {p.warranty})")
    lines.extend(_more_suffix(len(products), limit))
    lines.append("")
    lines.append(LIST_HINT)
    return "\n".join(lines)


def format_price_lines(products: List[ProductRecord], limit: int = DEFAULT_DISPLAY_LIMIT) -> str:
    lines = [
        f"{p.display_name} — Price: ₹{format_price(p.price)} (MRP ₹{format_price(p.mrp)})"
        for p in products[:limit]
    ]
    lines.extend(_more_suffix(len(products), limit))
    return "\n".join(lines)


def format_warranty_lines(products: List[ProductRecord], limit: int = DEFAULT_DISPLAY_LIMIT) -> str:
    lines = [f"{p.display_name} — Warranty: {p.warranty}" for p in products[:limit]]
    lines.extend(_more_suffix(len(products), limit))
    return "\n".join(lines)


def format_details(products: List[ProductRecord], limit: int = DEFAULT_DISPLAY_LIMIT) -> str:
    blocks: List[str] = []
    for p in products[:limit]:
        lines = [p.display_name, f"Price: ₹{format_price(p.price)} (MRP ₹{format_price(p.mrp)})"]
        for key, value in p.specs.items():
            label = key.replace("_", " ").strip().capitalize()
            lines.append(f"{label}: {value}")
        lines.append(p.description or "No description available.")
        blocks.append("\n".join(lines))
    blocks.extend(_more_suffix(len(products), limit))
    return "\n\n".join(blocks)


FORMATTERS = {
    "price": format_price_lines,
    "warranty": format_warranty_lines,
    "details": format_details,
}


class CatalogResolver:
    """Deterministic catalog answers for list/price/warranty/details intents."""

    def __init__(self, catalog: Catalog, display_limit: int = DEFAULT_DISPLAY_LIMIT):
        self.catalog = catalog
        self.display_limit = max(1, int(display_limit))

    def resolve(self, intent: str, message: str, active_ids: Iterable[str] = ()) -> Optional[ResolutionResult]:
        """Answer from the catalog, or return None to hand over to the next tier.

        A product question with nothing to resolve against produces a clarify
        result; that is a final answer, not a miss.
        """
        if intent == "list":
            return self._resolve_list(message)
        if intent in FORMATTERS:
            return self._resolve_product_question(intent, message, set(active_ids or ()))
        return None

    def _list_result(self, found: List[ProductRecord]) -> Optional[ResolutionResult]:
        if not found:
            return None
        return ResolutionResult(
            reply=format_list(found, self.display_limit),
            source="products",
            matched_product_ids=[p.id for p in found],
        )

    def _resolve_list(self, message: str) -> Optional[ResolutionResult]:
        query = extract_query(message, cue_words("list")) or message
        return self._list_result(self.catalog.search(query))

    def _resolve_product_question(self, intent: str, message: str, active_ids: Set[str]) -> ResolutionResult:
        query = extract_query(message, cue_words(intent))
        found = self.catalog.search(query) if query else []
        if not found:
            found = self.catalog.by_ids(active_ids)
        if not found:
            return ResolutionResult(reply=CLARIFY_REPLY, source="clarify")
        return ResolutionResult(
            reply=FORMATTERS[intent](found, self.display_limit),
            source="products",
            matched_product_ids=[p.id for p in found],
        )

    def window_search(self, message: str) -> List[ProductRecord]:
        """Search the whole query, then shorter runs of its words, longest first.

        Lets "do you stock boat airdopes" find the Airdopes through the
        "boat airdopes" window. The first window with hits wins.
        """
        tokens = extract_query(message).split()[:WINDOW_MAX_TOKENS]
        for size in range(len(tokens), 0, -1):
            for start in range(len(tokens) - size + 1):
                query = " ".join(tokens[start:start + size])
                if len(query) < WINDOW_MIN_CHARS:
                    continue
                found = self.catalog.search(query)
                if found:
                    return found
        return []

    def recheck(self, message: str) -> Optional[ResolutionResult]:
        """Catalog-only second look used after a vague generative answer."""
        return self._list_result(self.window_search(message))

    def catalog_context(self, message: str, active_ids: Iterable[str] = ()) -> str:
        """Short plain-text rendering of relevant products for the LLM prompt."""
        found = self.window_search(message)
        if not found:
            found = self.catalog.by_ids(active_ids)
        lines = []
        for p in found[:CONTEXT_PRODUCT_LIMIT]:
            line = f"- {p.brand} {p.name}: ₹{format_price(p.price)} (MRP ₹{format_price(p.mrp)}), warranty {p.warranty}"
            if p.description:
                line += f". {p.description}"
            lines.append(line)
        return "\n".join(lines)
