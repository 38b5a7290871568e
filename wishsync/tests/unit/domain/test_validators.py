from __future__ import annotations

import pytest

from wishsync.domain.entities import Wishlist, WishlistItem
from wishsync.domain.errors import ValidationError
from wishsync.domain.validators import (
    can_add_to_wishlist,
    can_move_item_to_cart,
    validate_add_item,
    validate_guest_item,
    validate_move_to_cart,
)


def test_validate_add_item_normalizes_payload() -> None:
    payload = validate_add_item({"productId": " p1 ", "notifyAvailability": True})

    assert payload == {"productId": "p1", "notifyPriceChange": False, "notifyAvailability": True}


@pytest.mark.parametrize(
    "data, field",
    [
        (None, "item"),
        ({}, "productId"),
        ({"productId": "   "}, "productId"),
        ({"productId": "p1", "notifyPriceChange": "yes"}, "flags"),
    ],
)
def test_validate_add_item_rejects_bad_input(data, field) -> None:
    with pytest.raises(ValidationError) as exc_info:
        validate_add_item(data)

    assert exc_info.value.field == field


def test_validate_move_to_cart_dedupes_and_keeps_order() -> None:
    assert validate_move_to_cart(["p2", "p1", "p2"]) == ["p2", "p1"]


@pytest.mark.parametrize("ids", [[], None, "p1", ["p1", ""]])
def test_validate_move_to_cart_rejects(ids) -> None:
    with pytest.raises(ValidationError):
        validate_move_to_cart(ids)


def test_validate_guest_item_is_lenient() -> None:
    assert validate_guest_item({"productId": "legacy-1", "extra": 1}) == []
    assert validate_guest_item({"productId": ""})
    assert validate_guest_item(["p1"])


def test_can_add_to_wishlist_reasons() -> None:
    wishlist = Wishlist.from_items([WishlistItem(product_id="p1")])

    assert can_add_to_wishlist(wishlist, "p2") is None
    assert can_add_to_wishlist(None, "p2") is None
    assert "already" in can_add_to_wishlist(wishlist, "p1")
    assert "full" in can_add_to_wishlist(wishlist, "p2", max_items=1)
    assert can_add_to_wishlist(wishlist, "") == "Invalid product id."


def _item(product=None, **raw) -> WishlistItem:
    return WishlistItem.from_raw({"productId": "p1", "product": product, **raw})


@pytest.mark.parametrize(
    "item, reason",
    [
        (None, "Item not found."),
        (_item(), "Product details are not available."),
        (_item({"stock": 4}), "Product details are incomplete."),
        (_item({"name": "Lamp", "stock": 0}), "Product is not available."),
        (_item({"title": "Lamp", "isAvailable": False, "stock": 9}), "Product is not available."),
        (_item({"name": "Lamp", "stock": 0}, isAvailable=True), "Out of stock."),
        (_item({"name": "Lamp", "stock": 2}), None),
        (_item({"name": "Lamp", "isAvailable": True}), None),
    ],
)
def test_can_move_item_to_cart(item, reason) -> None:
    assert can_move_item_to_cart(item) == reason
