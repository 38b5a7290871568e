from __future__ import annotations

from wishsync.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
    map_api_error,
)
from wishsync.domain.errors import (
    DuplicateError,
    ErrorKind,
    ModeError,
    NetworkError,
    NotFoundError,
    ValidationError,
)
from wishsync.usecases.error_mapping import error_message, to_wishlist_error


def _client_error(status: int, payload=None) -> ApiClientError:
    return ApiClientError(f"HTTP {status}", status=status, payload=payload)


def test_status_codes_map_to_error_kinds() -> None:
    cases = [
        (409, DuplicateError),
        (404, NotFoundError),
        (400, ValidationError),
        (422, ValidationError),
        (401, ModeError),
        (403, ModeError),
        (429, NetworkError),
    ]
    for status, expected in cases:
        mapped = map_api_error(_client_error(status), product_id="p1", operation="add")
        assert isinstance(mapped, expected), status


def test_duplicate_and_not_found_carry_product_id() -> None:
    assert map_api_error(_client_error(409), product_id="p9").product_id == "p9"
    assert map_api_error(_client_error(404), product_id="p9").product_id == "p9"


def test_validation_uses_payload_messages_and_field() -> None:
    mapped = map_api_error(
        _client_error(400, {"errors": ["Invalid product ID", {"msg": "Too many"}], "field": "productId"})
    )

    assert isinstance(mapped, ValidationError)
    assert mapped.field == "productId"
    assert mapped.errors == ["Invalid product ID", "Too many"]


def test_validation_without_details_has_generic_reason() -> None:
    mapped = map_api_error(_client_error(422))

    assert mapped.field == "request"
    assert mapped.user_message == "Invalid wishlist request."


def test_auth_failures_keep_the_operation_name() -> None:
    mapped = map_api_error(_client_error(401), operation="move_to_cart")

    assert mapped.kind is ErrorKind.MODE
    assert mapped.operation == "move_to_cart"
    assert mapped.requires_auth is True


def test_transport_and_server_failures_are_network_errors() -> None:
    for exc in (
        ApiServerError("boom", status=502),
        ApiTimeoutError("slow"),
        ApiError("weird", status=302),
        ConnectionResetError("reset"),
    ):
        assert map_api_error(exc).kind is ErrorKind.NETWORK


def test_domain_errors_pass_through_unchanged() -> None:
    original = DuplicateError("p1")

    assert map_api_error(original) is original
    assert to_wishlist_error(original) is original


def test_error_message_prefers_user_message() -> None:
    assert error_message(NetworkError("socket")) == "Connection problem. Please try again."
    assert error_message(RuntimeError("  ")) == "Unexpected error."
    assert error_message(RuntimeError("boom")) == "boom"
