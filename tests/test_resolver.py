from assistant.catalog import Catalog
from assistant.resolver import CLARIFY_REPLY, CatalogResolver

from conftest import make_product


def test_list_scenario_show_me_samsung(catalog):
    result = CatalogResolver(catalog).resolve("list", "show me Samsung")
    assert result.source == "products"
    assert result.matched_product_ids == ["p1"]
    assert "Found 1 product(s):" in result.reply
    assert "1. Samsung Galaxy Tab S10 — ₹45999 (Warranty: 1 year manufacturer warranty)" in result.reply


def test_list_truncates_display_but_keeps_all_ids():
    products = [make_product(f"e{i}", "Noise", f"Buds {i}", keywords=("tws",)) for i in range(8)]
    result = CatalogResolver(Catalog(products), display_limit=6).resolve("list", "show tws")
    assert result.matched_product_ids == [f"e{i}" for i in range(8)]
    assert "6. Noise Buds 5" in result.reply
    assert "Buds 6" not in result.reply
    assert "...and 2 more." in result.reply


def test_list_falls_back_to_whole_message_when_only_cues(catalog):
    # "show me" strips to nothing, so the original text is searched and nothing matches.
    assert CatalogResolver(catalog).resolve("list", "show me") is None


def test_list_without_hits_is_a_miss(catalog):
    assert CatalogResolver(catalog).resolve("list", "find a washing machine") is None


def test_price_by_direct_search(catalog):
    result = CatalogResolver(catalog).resolve("price", "price of iPhone 17 Pro?")
    assert result.matched_product_ids == ["p2"]
    assert result.reply == "Apple iPhone 17 Pro — Price: ₹134900 (MRP ₹134900)"


def test_warranty_follow_up_uses_active_context(catalog):
    result = CatalogResolver(catalog).resolve("warranty", "what's the warranty?", {"p1"})
    assert result.source == "products"
    assert result.matched_product_ids == ["p1"]
    assert result.reply == "Samsung Galaxy Tab S10 — Warranty: 1 year manufacturer warranty"


def test_direct_hit_beats_active_context(catalog):
    result = CatalogResolver(catalog).resolve("warranty", "warranty of the boat airdopes", {"p1"})
    assert result.matched_product_ids == ["p3"]


def test_missing_warranty_reads_na(catalog):
    result = CatalogResolver(catalog).resolve("warranty", "jbl warranty")
    assert result.reply == "JBL Flip 6 — Warranty: N/A"


def test_details_lists_specs_and_description(catalog):
    result = CatalogResolver(catalog).resolve("details", "tell me about it", {"p1"})
    assert result.reply.splitlines() == [
        "Samsung Galaxy Tab S10",
        "Price: ₹45999 (MRP ₹52999)",
        "Display: 11-inch AMOLED",
        "Warranty: 1 year manufacturer warranty",
        "Slim Android tablet with an S Pen.",
    ]


def test_price_for_every_active_product(catalog):
    result = CatalogResolver(catalog).resolve("price", "how much?", {"p3", "p1"})
    assert result.matched_product_ids == ["p1", "p3"]
    assert result.reply.splitlines() == [
        "Samsung Galaxy Tab S10 — Price: ₹45999 (MRP ₹52999)",
        "boAt Airdopes 141 — Price: ₹1299 (MRP ₹4490)",
    ]


def test_clarify_when_nothing_to_resolve(catalog):
    result = CatalogResolver(catalog).resolve("price", "price", set())
    assert result.source == "clarify"
    assert result.reply == CLARIFY_REPLY
    assert result.matched_product_ids == []


def test_general_intent_is_left_to_the_next_tier(catalog):
    assert CatalogResolver(catalog).resolve("general", "hello", {"p1"}) is None


def test_resolution_is_deterministic(catalog):
    resolver = CatalogResolver(catalog)
    first = resolver.resolve("price", "how much?", {"p1", "p3"})
    second = resolver.resolve("price", "how much?", {"p1", "p3"})
    assert first == second


def test_recheck_finds_products_inside_a_sentence(catalog):
    result = CatalogResolver(catalog).recheck("do you stock boat airdopes")
    assert result.source == "products"
    assert result.matched_product_ids == ["p3"]


def test_recheck_misses_quietly(catalog):
    assert CatalogResolver(catalog).recheck("xyz123") is None


def test_catalog_context_prefers_query_matches(catalog):
    resolver = CatalogResolver(catalog)
    ctx = resolver.catalog_context("is the jbl flip waterproof", {"p1"})
    assert ctx.startswith("- JBL Flip 6: ₹9999 (MRP ₹14999)")
    assert "Galaxy" not in ctx
    assert "Galaxy Tab S10" in resolver.catalog_context("is it waterproof", {"p1"})
    assert resolver.catalog_context("xyz123") == ""


def test_pointer_words_fall_back_to_active_context():
    # "one" would otherwise substring-match names such as "OnePlus".
    products = [
        make_product("p1", "Samsung", "Galaxy Tab S10", 45999, specs={"warranty": "1 year"}),
        make_product("p2", "OnePlus", "13R", 42999),
        make_product("p3", "Sony", "WH-1000XM5", 29990),
    ]
    resolver = CatalogResolver(Catalog(products))
    assert resolver.resolve("warranty", "what's the warranty on this one?", {"p1"}).matched_product_ids == ["p1"]
    assert resolver.resolve("price", "how much is that one?", {"p1"}).matched_product_ids == ["p1"]
    assert resolver.resolve("details", "which ones are these?", {"p1"}).matched_product_ids == ["p1"]
