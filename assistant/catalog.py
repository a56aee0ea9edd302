from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import CatalogError
from .models import ProductRecord
from .utils import normalize_text


class Catalog:
    """Read-only, ordered view over one catalog snapshot.

    Built once at startup and shared between requests. Lookups never
    reorder or mutate records; a catalog update means building a new Catalog.
    """

    def __init__(self, products: Iterable[ProductRecord]):
        items: Tuple[ProductRecord, ...] = tuple(products)
        by_id: Dict[str, ProductRecord] = {}
        for p in items:
            if p.id in by_id:
                raise CatalogError(f"duplicate product id: {p.id}")
            by_id[p.id] = p
        self._items = items
        self._by_id = by_id
        # Precomputed lowercase haystacks, parallel to _items.
        self._haystacks: Tuple[Tuple[str, str, str], ...] = tuple(
            (
                " ".join([p.brand, p.name] + list(p.keywords)).lower(),
                p.brand.lower(),
                p.name.lower(),
            )
            for p in items
        )

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ProductRecord]:
        return iter(self._items)

    def get(self, product_id: str) -> Optional[ProductRecord]:
        return self._by_id.get(product_id)

    def search(self, query: str) -> List[ProductRecord]:
        """Case-insensitive substring search over brand, name and keywords.

        An empty query matches nothing rather than everything.
        """
        q = normalize_text(query)
        if not q:
            return []
        out: List[ProductRecord] = []
        for p, (combined, brand, name) in zip(self._items, self._haystacks):
            if q in combined or q in brand or q in name:
                out.append(p)
        return out

    def by_ids(self, ids: Iterable[str]) -> List[ProductRecord]:
        wanted = set(ids or [])
        if not wanted:
            return []
        return [p for p in self._items if p.id in wanted]
