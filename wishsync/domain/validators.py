"""Pure validation rules for wishlist inputs.

Validators return normalized values or raise ``ValidationError``; they do not
touch adapters or storage.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from .entities import ProductId, Wishlist, WishlistItem
from .errors import ValidationError

_FLAG_FIELDS = ("notifyPriceChange", "notifyAvailability")


def normalize_product_id(value: Any) -> Optional[ProductId]:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def validate_add_item(item_data: Any) -> Dict[str, Any]:
    """Validate add-item input and return the normalized payload.

    Args:
        item_data: Mapping with ``productId`` and optional boolean
            ``notifyPriceChange`` / ``notifyAvailability``.

    Returns:
        Dict with a string ``productId`` and both flags as booleans.

    Raises:
        ValidationError: If the mapping is missing, the id is empty, or a
            flag is not a boolean.
    """
    if not isinstance(item_data, Mapping):
        raise ValidationError("item", "Item data is required.")

    errors: List[str] = []
    product_id = normalize_product_id(item_data.get("productId"))
    if product_id is None:
        errors.append("Product id is required.")

    for flag in _FLAG_FIELDS:
        value = item_data.get(flag)
        if value is not None and not isinstance(value, bool):
            errors.append(f"{flag} must be a boolean.")

    if errors:
        field = "productId" if product_id is None else "flags"
        raise ValidationError(field, errors[0], errors=errors)

    return {
        "productId": product_id,
        "notifyPriceChange": bool(item_data.get("notifyPriceChange") or False),
        "notifyAvailability": bool(item_data.get("notifyAvailability") or False),
    }


def validate_move_to_cart(product_ids: Any) -> List[ProductId]:
    """Return de-duplicated ids in request order; reject empty or blank input."""
    if isinstance(product_ids, (str, bytes)) or not isinstance(product_ids, Iterable):
        raise ValidationError("productIds", "Select at least one product.")
    ids = list(product_ids)
    if not ids:
        raise ValidationError("productIds", "Select at least one product.")

    normalized: List[ProductId] = []
    invalid: List[str] = []
    for raw in ids:
        product_id = normalize_product_id(raw)
        if product_id is None:
            invalid.append(repr(raw))
        elif product_id not in normalized:
            normalized.append(product_id)
    if invalid:
        raise ValidationError("productIds", f"Invalid product ids: {', '.join(invalid)}")
    return normalized


def validate_guest_item(raw: Any) -> List[str]:
    """Lenient check for rows read from the device store (legacy shapes allowed)."""
    if not isinstance(raw, Mapping):
        return ["Guest item is not an object."]
    if normalize_product_id(raw.get("productId")) is None:
        return ["Guest item has no productId."]
    return []


def can_add_to_wishlist(
    wishlist: Optional[Wishlist],
    product_id: Any,
    *,
    max_items: Optional[int] = None,
) -> Optional[str]:
    """Return the reason an add would be refused locally, or ``None``.

    The backend stays authoritative; this only gives early feedback.
    """
    key = normalize_product_id(product_id)
    if key is None:
        return "Invalid product id."
    if wishlist is None:
        return None
    if wishlist.contains(key):
        return "This product is already in your wishlist."
    if max_items is not None and wishlist.item_count >= max_items:
        return f"Your wishlist is full ({max_items} items)."
    return None


def can_move_item_to_cart(item: Optional[WishlistItem]) -> Optional[str]:
    """Return why ``item`` cannot go to the cart, or ``None`` when it can.

    Needs the populated product. The item-level ``is_available`` computed by
    the server wins over the product flag, which wins over the stock count.
    """
    if item is None:
        return "Item not found."
    product = item.product
    if not product:
        return "Product details are not available."
    if not (product.get("name") or product.get("title")):
        return "Product details are incomplete."
    stock = product.get("stock")
    available = item.is_available
    if available is None:
        available = product.get("isAvailable")
    if available is None:
        available = isinstance(stock, (int, float)) and stock > 0
    if not available:
        return "Product is not available."
    if stock == 0:
        return "Out of stock."
    return None


__all__ = [
    "can_add_to_wishlist",
    "can_move_item_to_cart",
    "normalize_product_id",
    "validate_add_item",
    "validate_guest_item",
    "validate_move_to_cart",
]
