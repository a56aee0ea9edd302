from fastapi.testclient import TestClient

from assistant.main import app


def run():
    client = TestClient(app)
    resp = client.post("/api/chat", json={"message": "show me Samsung", "history": []})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    ids = (data.get("context") or {}).get("lastProductIds") or []
    assert data.get("source") == "products", data
    assert ids, "list reply must carry product context"

    follow = client.post(
        "/api/chat",
        json={
            "message": "what's the warranty?",
            "history": [
                {"role": "user", "text": "show me Samsung"},
                {"role": "assistant", "text": data["reply"], "context": data["context"]},
            ],
        },
    )
    assert follow.status_code == 200, follow.text
    assert "Warranty:" in follow.json().get("reply", ""), follow.text
    print("Context round-trip passed.")
    print(data["reply"])
    print(follow.json()["reply"])


if __name__ == "__main__":
    run()
