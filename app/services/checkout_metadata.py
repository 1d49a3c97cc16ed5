"""
Checkout session metadata encoding

The gateway stores string notes only (at most 15 keys of 256 characters),
so the purchased items travel as compact JSON split across numbered keys.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional
import json
import uuid

from app.core.exceptions import ValidationException
from app.services.payment_gateway import MAX_METADATA_KEYS, MAX_METADATA_VALUE_LENGTH

ITEMS_KEY_PREFIX = "items_"
SCALAR_KEYS = ("user_id", "coupon_code", "subtotal", "discount", "tax")
MAX_ITEM_CHUNKS = MAX_METADATA_KEYS - len(SCALAR_KEYS)


@dataclass
class CheckoutLine:
    product_id: uuid.UUID
    quantity: int
    price: Decimal


@dataclass
class CheckoutMetadata:
    user_id: uuid.UUID
    coupon_code: Optional[str]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    items: List[CheckoutLine] = field(default_factory=list)


def encode_checkout_metadata(checkout: CheckoutMetadata) -> Dict[str, str]:
    """
    Flatten a checkout into gateway notes

    Raises:
        ValidationException: The item list does not fit in the notes budget
    """
    payload = json.dumps(
        [[str(line.product_id), line.quantity, str(line.price)] for line in checkout.items],
        separators=(",", ":"),
    )
    chunks = [
        payload[start:start + MAX_METADATA_VALUE_LENGTH]
        for start in range(0, len(payload), MAX_METADATA_VALUE_LENGTH)
    ]
    if len(chunks) > MAX_ITEM_CHUNKS:
        raise ValidationException("Too many distinct products for a single checkout")

    metadata = {
        "user_id": str(checkout.user_id),
        "coupon_code": checkout.coupon_code or "",
        "subtotal": str(checkout.subtotal),
        "discount": str(checkout.discount),
        "tax": str(checkout.tax),
    }
    for index, chunk in enumerate(chunks):
        metadata[f"{ITEMS_KEY_PREFIX}{index}"] = chunk
    return metadata


def decode_checkout_metadata(metadata: Dict[str, str]) -> CheckoutMetadata:
    """
    Rebuild a checkout from gateway notes

    Raises:
        ValidationException: Notes are missing or malformed
    """
    try:
        payload = "".join(
            metadata[f"{ITEMS_KEY_PREFIX}{index}"]
            for index in range(MAX_ITEM_CHUNKS)
            if f"{ITEMS_KEY_PREFIX}{index}" in metadata
        )
        items = [
            CheckoutLine(product_id=uuid.UUID(product_id), quantity=int(quantity), price=Decimal(price))
            for product_id, quantity, price in json.loads(payload)
        ]
        return CheckoutMetadata(
            user_id=uuid.UUID(metadata["user_id"]),
            coupon_code=metadata.get("coupon_code") or None,
            subtotal=Decimal(metadata["subtotal"]),
            discount=Decimal(metadata["discount"]),
            tax=Decimal(metadata["tax"]),
            items=items,
        )
    except (KeyError, ValueError, TypeError, InvalidOperation) as e:
        raise ValidationException(f"Checkout session metadata is malformed: {e}")
