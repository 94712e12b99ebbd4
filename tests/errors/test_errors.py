from docmap.errors import (
    RESCUE_RESPONSES,
    DocmapError,
    DocumentNotFound,
    NoSessionHosts,
    ValidationError,
    status_for,
)


class Book:
    pass


class BookNotFound(DocumentNotFound):
    pass


def test_document_not_found_message_names_tag_and_identity():
    exc = DocumentNotFound(Book, 12)
    assert "Book" in str(exc)
    assert "12" in str(exc)
    assert isinstance(exc, DocmapError)


def test_validation_error_formats_messages():
    exc = ValidationError({"title": ["is required"], "__all__": ["bad", "worse"]})
    assert str(exc) == "title: is required; non-field: bad; worse"
    assert exc.errors["__all__"] == ["bad", "worse"]


def test_status_for_known_errors():
    assert status_for(DocumentNotFound("Book", 1)) == 404
    assert status_for(ValidationError({"title": ["blank"]})) == 422


def test_status_for_walks_subclasses_and_falls_back():
    assert status_for(BookNotFound("Book", 1)) == 404
    assert status_for(NoSessionHosts("default")) == 500
    assert status_for(KeyError("x"), default=400) == 400


def test_status_for_custom_table():
    table = dict(RESCUE_RESPONSES)
    table["builtins.KeyError"] = 410
    assert status_for(KeyError("x"), responses=table) == 410
