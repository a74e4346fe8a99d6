"""Library Store Backend - Error kind and body tests."""

import pytest

from library_api.exceptions import (
    STATUS_BY_KIND,
    AuthenticationError,
    ConflictError,
    DatabaseError,
    ErrorKind,
    LibraryError,
    NotFoundError,
    ValidationError,
)


@pytest.mark.parametrize(
    "error, status",
    [
        (ValidationError("bad"), 400),
        (AuthenticationError("no"), 401),
        (NotFoundError("gone"), 404),
        (ConflictError("taken"), 409),
        (DatabaseError(), 500),
    ],
)
def test_status_follows_kind(error, status):
    assert error.status_code == status
    assert STATUS_BY_KIND[error.kind] == status


def test_body_omits_empty_errors_and_context():
    error = ConflictError("taken", context={"book_id": "secret-internal"})
    assert error.to_body() == {"success": False, "message": "taken"}


def test_body_includes_item_errors():
    error = ValidationError("Invalid checkout request", errors=["books[0].quantity must be a positive integer"])
    assert error.to_body()["errors"] == ["books[0].quantity must be a positive integer"]


def test_kind_can_be_chosen_per_instance():
    error = LibraryError("odd", kind=ErrorKind.NOT_FOUND)
    assert error.status_code == 404


def test_not_found_default_message():
    error = NotFoundError(resource="book", resource_id="42")
    assert error.message == "book with ID '42' was not found"
    assert error.context == {"resource": "book", "resource_id": "42"}
