from typing import List, Optional

import pytest

from assistant.catalog import Catalog
from assistant.config import Settings
from assistant.models import ProductRecord


def make_product(pid: str, brand: str, name: str, price: float = 999, mrp: Optional[float] = None, **extra) -> ProductRecord:
    return ProductRecord(id=pid, brand=brand, name=name, price=price, mrp=mrp if mrp is not None else price, **extra)


SAMPLE_PRODUCTS: List[ProductRecord] = [
    make_product(
        "p1", "Samsung", "Galaxy Tab S10", 45999, 52999,
        keywords=("tablet", "tab"),
        specs={"display": "11-inch AMOLED", "warranty": "1 year manufacturer warranty"},
        description="Slim Android tablet with an S Pen.",
    ),
    make_product(
        "p2", "Apple", "iPhone 17 Pro", 134900, 134900,
        keywords=("phone", "smartphone"),
        specs={"warranty": "1 year Apple limited warranty"},
    ),
    make_product(
        "p3", "boAt", "Airdopes 141", 1299, 4490,
        keywords=("earbuds", "tws"),
        specs={"playback": "42 hours", "warranty": "1 year"},
    ),
    make_product(
        "p4", "JBL", "Flip 6", 9999, 14999,
        keywords=("speaker", "bluetooth speaker"),
    ),
]


class FakeBackend:
    """Stands in for a generative backend; records every call."""

    def __init__(self, reply: str = "Happy to help with that.", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls = []

    def complete(self, system_prompt, history, user_message, catalog_context=""):
        self.calls.append(
            {"system_prompt": system_prompt, "history": list(history), "message": user_message, "catalog_context": catalog_context}
        )
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def catalog() -> Catalog:
    return Catalog(SAMPLE_PRODUCTS)


@pytest.fixture
def settings() -> Settings:
    # No API keys: catalog/FAQ-only unless a test passes a backend.
    return Settings()
