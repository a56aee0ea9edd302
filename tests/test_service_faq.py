import json

import pytest

from assistant.models import FAQItem
from assistant.service_faq import DEFAULT_FAQ, FAQ, GENERIC_REPLY, find_faq_answer, load_faq


faq = FAQ()


@pytest.mark.parametrize(
    "message,faq_id",
    [
        ("What is the warranty on these?", "warranty"),
        ("How long does shipping take?", "delivery"),
        ("when will you deliver", "delivery"),
        ("Can I return it?", "returns"),
        ("recommend good TWS", "earbuds"),
        ("any earbuds under 2000", "earbuds"),
        ("which phones do you sell", "phones"),
        ("do you accept UPI", "payments"),
    ],
)
def test_keyword_rules(message, faq_id):
    assert faq.find(message).id == faq_id


def test_rules_are_checked_in_order():
    # Mentions both warranty and delivery; the warranty rule comes first.
    assert faq.find("warranty and delivery time").id == "warranty"


def test_keywords_match_at_word_start_only():
    assert faq.find("headphones") is None
    assert faq.answer("premium headphones") == GENERIC_REPLY


def test_misspelled_keyword_still_matches():
    assert faq.find("warrenty period").id == "warranty"
    assert faq.find("delivry charges").id == "delivery"


def test_unknown_text_gets_the_generic_reply():
    assert faq.answer("xyz123") == GENERIC_REPLY
    assert faq.answer("") == GENERIC_REPLY


def test_load_faq_from_file(tmp_path):
    path = tmp_path / "faq.json"
    path.write_text(json.dumps([{"id": "hours", "keywords": ["open"], "answer": "We are open 10am–8pm."}]), encoding="utf-8")
    custom = FAQ(load_faq(path))
    assert custom.answer("when are you open") == "We are open 10am–8pm."
    assert custom.answer("warranty?") == GENERIC_REPLY


def test_load_faq_falls_back_to_defaults(tmp_path):
    path = tmp_path / "faq.json"
    path.write_text("not json", encoding="utf-8")
    assert load_faq(path) == DEFAULT_FAQ
    assert load_faq(None) == DEFAULT_FAQ
    assert isinstance(load_faq()[0], FAQItem)


def test_find_faq_answer_uses_the_default_table():
    assert find_faq_answer("is cash on delivery available") == FAQ().answer("is cash on delivery available")
    assert find_faq_answer("xyz123") == GENERIC_REPLY
