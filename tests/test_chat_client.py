from unittest.mock import MagicMock

import pytest
import requests

from assistant.catalog import Catalog
from assistant.chat_client import ChatClient
from assistant.service_faq import GENERIC_REPLY

from conftest import SAMPLE_PRODUCTS


def _server_reply(body=None, status=200, bad_json=False):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 400
    if bad_json:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = body
    return resp


def _client(session):
    return ChatClient("http://localhost:8000/", Catalog(SAMPLE_PRODUCTS), session=session)


def test_posts_to_the_chat_endpoint():
    session = MagicMock()
    session.post.return_value = _server_reply({"reply": "From the server", "source": "gemini"})
    result = _client(session).send("tell me a joke")

    assert result.reply == "From the server"
    assert result.source == "gemini"
    args, kwargs = session.post.call_args
    assert args[0] == "http://localhost:8000/api/chat"
    assert kwargs["json"] == {"message": "tell me a joke", "history": []}


def test_unreachable_server_answers_locally():
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("refused")
    result = _client(session).send("show me jbl")
    assert result.source == "products"
    assert result.matched_product_ids == ["p4"]


def test_non_json_body_answers_locally():
    session = MagicMock()
    session.post.return_value = _server_reply(bad_json=True)
    assert _client(session).send("show me jbl").matched_product_ids == ["p4"]


def test_server_error_answers_locally():
    session = MagicMock()
    session.post.return_value = _server_reply({"error": "Internal server error"}, status=500)
    assert _client(session).send("xyz123").reply == GENERIC_REPLY


def test_stock_server_answer_gets_a_local_catalog_recheck():
    session = MagicMock()
    session.post.return_value = _server_reply({"reply": GENERIC_REPLY, "source": "faq"})
    result = _client(session).send("do you stock boat airdopes")
    assert result.source == "products"
    assert result.matched_product_ids == ["p3"]


def test_context_is_sent_back_on_the_next_turn():
    session = MagicMock()
    session.post.side_effect = [
        _server_reply({"reply": "Found 1 product(s): ...", "source": "products", "context": {"version": 1, "lastProductIds": ["p1"]}}),
        _server_reply({"reply": "Samsung Galaxy Tab S10 — Warranty: 1 year", "source": "products"}),
    ]
    client = _client(session)
    client.send("show me Samsung")
    client.send("what's the warranty?")

    history = session.post.call_args.kwargs["json"]["history"]
    assert history[0] == {"role": "user", "text": "show me Samsung"}
    assert history[1]["role"] == "assistant"
    assert history[1]["context"] == {"version": 1, "lastProductIds": ["p1"]}


def test_reset_clears_history():
    session = MagicMock()
    session.post.return_value = _server_reply({"reply": "Hi!", "source": "gemini"})
    client = _client(session)
    client.send("hello")
    assert len(client.history) == 2
    client.reset()
    assert client.history == []


def test_empty_message_is_rejected():
    with pytest.raises(ValueError):
        _client(MagicMock()).send("   ")
