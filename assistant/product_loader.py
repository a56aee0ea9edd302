import json
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from .catalog import Catalog
from .errors import CatalogError
from .models import ProductRecord
from .utils import get_logger, log_event


logger = get_logger("catalog")


def load_products(path: Union[str, Path]) -> List[ProductRecord]:
    """Read product records from a JSON array file.

    A missing file yields an empty list (the chat still answers from the FAQ).
    Rows that fail validation are skipped and logged; a file that is not a
    JSON array raises CatalogError.
    """
    p = Path(path)
    if not p.exists():
        log_event(logger, "catalog_missing", path=str(p))
        return []
    try:
        with p.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"cannot read catalog {p}: {e}") from e
    if not isinstance(raw, list):
        raise CatalogError(f"catalog {p} must contain a JSON array")

    products: List[ProductRecord] = []
    for idx, row in enumerate(raw):
        try:
            products.append(ProductRecord.model_validate(row))
        except ValidationError as e:
            log_event(logger, "catalog_row_skipped", index=idx, errors=e.error_count())
    return products


def load_catalog(path: Union[str, Path]) -> Catalog:
    catalog = Catalog(load_products(path))
    log_event(logger, "catalog_loaded", path=str(path), size=len(catalog))
    return catalog
