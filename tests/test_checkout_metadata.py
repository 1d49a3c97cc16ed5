"""
Tests for packing checkout details into gateway notes.
"""

import json
import uuid
from decimal import Decimal

import pytest

from app.core.exceptions import ValidationException
from app.services.checkout_metadata import (
    CheckoutLine,
    CheckoutMetadata,
    decode_checkout_metadata,
    encode_checkout_metadata,
)
from app.services.payment_gateway import MAX_METADATA_KEYS, MAX_METADATA_VALUE_LENGTH


def _checkout(item_count: int, coupon_code=None) -> CheckoutMetadata:
    return CheckoutMetadata(
        user_id=uuid.uuid4(),
        coupon_code=coupon_code,
        subtotal=Decimal("250.00"),
        discount=Decimal("50.00"),
        tax=Decimal("16.00"),
        items=[
            CheckoutLine(product_id=uuid.uuid4(), quantity=index + 1, price=Decimal("12.50"))
            for index in range(item_count)
        ],
    )


def test_notes_fit_gateway_limits():
    metadata = encode_checkout_metadata(_checkout(30, coupon_code="SAVE20"))

    assert len(metadata) <= MAX_METADATA_KEYS
    assert all(isinstance(value, str) for value in metadata.values())
    assert all(len(value) <= MAX_METADATA_VALUE_LENGTH for value in metadata.values())
    assert metadata["coupon_code"] == "SAVE20"
    assert metadata["tax"] == "16.00"


def test_items_are_compact_json_triples():
    checkout = _checkout(1)
    metadata = encode_checkout_metadata(checkout)

    line = checkout.items[0]
    assert json.loads(metadata["items_0"]) == [[str(line.product_id), 1, "12.50"]]


def test_decoded_checkout_matches_original():
    checkout = _checkout(12, coupon_code="SAVE20")

    decoded = decode_checkout_metadata(encode_checkout_metadata(checkout))

    assert decoded == checkout


def test_missing_coupon_decodes_to_none():
    decoded = decode_checkout_metadata(encode_checkout_metadata(_checkout(2)))

    assert decoded.coupon_code is None


def test_too_many_products_is_rejected():
    with pytest.raises(ValidationException):
        encode_checkout_metadata(_checkout(200))


@pytest.mark.parametrize(
    "metadata",
    [
        {},
        {"user_id": "not-a-uuid", "subtotal": "1", "discount": "0", "tax": "0", "items_0": "[]"},
        {"user_id": str(uuid.uuid4()), "subtotal": "1", "discount": "0", "tax": "0", "items_0": "[[1,"},
    ],
)
def test_malformed_notes_are_rejected(metadata):
    with pytest.raises(ValidationException):
        decode_checkout_metadata(metadata)
