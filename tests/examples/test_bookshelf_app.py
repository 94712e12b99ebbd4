import pytest

from docmap.hooks import CLEANUP, lifecycle
from docmap.identity import IdentityMap
from examples.bookshelf_app import (
    Book,
    DocumentStore,
    Repository,
    make_app,
    request,
    run_demo,
    seed_sample_data,
)
from docmap.middleware import IdentityMapMiddleware


@pytest.fixture(autouse=True)
def clear_lifecycle():
    lifecycle.clear()
    yield
    lifecycle.clear()


def test_repeated_lookups_share_one_instance_within_a_request():
    store = DocumentStore()
    seed_sample_data(store)
    identity_map = IdentityMap("bookshelf")
    app = IdentityMapMiddleware(make_app(Repository(store, identity_map)), identity_map)

    status, payload = request(app, "/books/2")

    assert status == "200 OK"
    assert payload == {"title": "Invisible Cities", "writer": "Italo Calvino", "same_instance": True}
    assert store.loads == {"Book": 1, "Writer": 1}
    assert len(identity_map) == 0


def test_entries_do_not_survive_between_requests():
    store = DocumentStore()
    seed_sample_data(store)
    identity_map = IdentityMap("bookshelf-requests")
    repository = Repository(store, identity_map)
    app = IdentityMapMiddleware(make_app(repository), identity_map)

    request(app, "/books/1")
    request(app, "/books/1")

    assert store.loads["Book"] == 2


def test_missing_book_renders_not_found():
    store = DocumentStore()
    seed_sample_data(store)
    identity_map = IdentityMap("bookshelf-404")
    app = IdentityMapMiddleware(make_app(Repository(store, identity_map)), identity_map)

    status, payload = request(app, "/books/99")

    assert status == "404 Not Found"
    assert "99" in payload["error"]
    assert (Book, 99) not in identity_map


def test_run_demo_reports_loads(tmp_path):
    outcome = run_demo(str(tmp_path))
    statuses = [status for status, _ in outcome["responses"]]
    assert statuses == ["200 OK", "200 OK", "404 Not Found"]
    assert outcome["loads"] == {"Book": 3, "Writer": 2}
    assert len(lifecycle.handlers(CLEANUP)) == 1
