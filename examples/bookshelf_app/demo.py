"""
Utility helpers for running the docmap bookshelf example end-to-end.
"""

from __future__ import annotations

import json
from collections import Counter
from typing import Any, Dict, List, Optional, Type

from docmap import DocumentNotFound, Integration, identity_map as default_identity_map, status_for
from docmap.identity import IdentityMap

from .models import Book, Writer

_REASONS = {200: "OK", 404: "Not Found", 422: "Unprocessable Entity", 500: "Internal Server Error"}


class DocumentStore:
    """
    In-memory stand-in for a document database, counting every load.
    """

    def __init__(self) -> None:
        self._documents: Dict[Type, Dict[int, Dict[str, Any]]] = {}
        self.loads: Counter = Counter()

    def insert(self, model: Type, document: Dict[str, Any]) -> None:
        self._documents.setdefault(model, {})[document["id"]] = dict(document)

    def load(self, model: Type, pk: int):
        self.loads[model.__name__] += 1
        document = self._documents.get(model, {}).get(pk)
        if document is None:
            return None
        return model(**document)


class Repository:
    """
    Loads documents through the identity map so repeated lookups share one instance.
    """

    def __init__(self, store: DocumentStore, identity_map: Optional[IdentityMap] = None) -> None:
        self.store = store
        self.identity_map = identity_map if identity_map is not None else default_identity_map

    def find(self, model: Type, pk: int):
        return self.identity_map.fetch((model, pk), lambda: self.store.load(model, pk), required=True)


def seed_sample_data(store: DocumentStore) -> Dict[str, List[Dict[str, Any]]]:
    writers = [{"id": 1, "name": "Ursula K. Le Guin"}, {"id": 2, "name": "Italo Calvino"}]
    books = [
        {"id": 1, "title": "The Dispossessed", "writer_id": 1},
        {"id": 2, "title": "Invisible Cities", "writer_id": 2},
        {"id": 3, "title": "The Lathe of Heaven", "writer_id": 1},
    ]
    for writer in writers:
        store.insert(Writer, writer)
    for book in books:
        store.insert(Book, book)
    return {"writers": writers, "books": books}


def make_app(repository: Repository):
    """
    WSGI application serving ``/books/<id>``.
    """

    def app(environ, start_response):
        try:
            pk = int(environ.get("PATH_INFO", "").rstrip("/").rsplit("/", 1)[-1])
            book = repository.find(Book, pk)
            again = repository.find(Book, pk)
            writer = repository.find(Writer, book.writer_id)
            status = 200
            payload: Dict[str, Any] = {
                "title": book.title,
                "writer": writer.name,
                "same_instance": book is again,
            }
        except DocumentNotFound as exc:
            status = status_for(exc)
            payload = {"error": str(exc)}
        body = json.dumps(payload).encode("utf-8")
        start_response(
            f"{status} {_REASONS.get(status, '')}".strip(),
            [("Content-Type", "application/json"), ("Content-Length", str(len(body)))],
        )
        return [body]

    return app


def request(app, path: str) -> tuple[str, Dict[str, Any]]:
    captured: Dict[str, str] = {}

    def start_response(status, headers, exc_info=None):
        captured["status"] = status

    result = app({"REQUEST_METHOD": "GET", "PATH_INFO": path}, start_response)
    try:
        body = b"".join(result)
    finally:
        close = getattr(result, "close", None)
        if close is not None:
            close()
    return captured["status"], json.loads(body)


def run_demo(root: str = ".") -> Dict[str, Any]:
    """
    Boot the integration, serve a few requests and report store loads.
    """

    integration = Integration(root).initialize()
    store = DocumentStore()
    seed_sample_data(store)
    app = integration.wrap_wsgi(make_app(Repository(store, integration.identity_map)))
    responses = [request(app, path) for path in ("/books/1", "/books/3", "/books/9")]
    return {"responses": responses, "loads": dict(store.loads)}


if __name__ == "__main__":
    outcome = run_demo()
    for status, payload in outcome["responses"]:
        print(status, payload)
    print("store loads:", outcome["loads"])
