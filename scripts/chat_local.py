"""
Console chat over the shared resolution pipeline.

Without --url every turn is answered locally (catalog + FAQ, no network).
With --url turns go to a running server and fall back to the local
pipeline whenever the server cannot be reached.

Run:
  python scripts/chat_local.py
  python scripts/chat_local.py --url http://localhost:8000
"""

import argparse

from assistant.chat_client import ChatClient
from assistant.config import load_settings
from assistant.context import build_context
from assistant.models import ConversationTurn
from assistant.pipeline import build_local_pipeline
from assistant.product_loader import load_catalog


def main():
    parser = argparse.ArgumentParser(description="Chat with the product assistant from a terminal.")
    parser.add_argument("--url", help="base URL of a running server, e.g. http://localhost:8000")
    args = parser.parse_args()

    settings = load_settings()
    catalog = load_catalog(settings.catalog_path)
    client = ChatClient(args.url, catalog) if args.url else None
    local = build_local_pipeline(catalog, display_limit=settings.list_display_limit)
    history = []

    print("Hi! Ask me about earbuds, phones, warranty or delivery. Empty line to quit.")
    while True:
        try:
            text = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            break
        if not text:
            break
        if client is not None:
            result = client.send(text)
        else:
            result = local.respond(text, history)
            history.append(ConversationTurn(role="user", text=text))
            history.append(
                ConversationTurn(role="assistant", text=result.reply, context=build_context(result.matched_product_ids))
            )
        print(f"[{result.source}] {result.reply}")


if __name__ == "__main__":
    main()
