"""
Razorpay payment gateway integration
Checkout sessions are Razorpay payment links
"""

import razorpay
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional
from fastapi import Request
import asyncio
import logging

from app.core.config import settings
from app.core.exceptions import PaymentGatewayException, ValidationException
from app.utils.helpers import to_minor_units, from_minor_units

logger = logging.getLogger(__name__)

# Razorpay notes limits
MAX_METADATA_KEYS = 15
MAX_METADATA_VALUE_LENGTH = 256

MAX_DESCRIPTION_LENGTH = 2048


@dataclass
class LineItem:
    """One priced line shown to the customer; amounts in major units"""
    name: str
    unit_amount: Decimal
    quantity: int = 1

    @property
    def amount(self) -> Decimal:
        return self.unit_amount * self.quantity


@dataclass
class GatewaySession:
    """Gateway-side view of a checkout session"""
    id: str
    payment_status: str  # "paid" or "unpaid"
    amount_total: Decimal
    url: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


class RazorpayGateway:
    """Razorpay API client wrapper

    Payment links carry a single amount, so line items are summed into it
    (discount lines are negative) and listed in the link description.
    Razorpay sends the customer to the callback URL whether or not they
    paid; an abandoned link is reported as unpaid by retrieve_session.
    """

    def __init__(self, client: Optional[razorpay.Client] = None, currency: Optional[str] = None):
        self.client = client or razorpay.Client(
            auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET)
        )
        self.currency = currency or settings.PAYMENT_CURRENCY

    async def create_session(
        self,
        line_items: List[LineItem],
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str]
    ) -> GatewaySession:
        """
        Create a hosted checkout session

        Args:
            line_items: Priced lines; their sum is the amount charged
            success_url: Where the customer lands after paying
            cancel_url: Storefront page for abandoned checkouts
            metadata: String key/value pairs echoed back on retrieval

        Returns:
            Session with its id and hosted payment url
        """
        self._check_metadata(metadata)
        amount = sum(to_minor_units(item.amount) for item in line_items)
        if amount <= 0:
            raise ValidationException("Checkout total must be greater than zero")

        data = {
            "amount": amount,
            "currency": self.currency,
            "accept_partial": False,
            "description": self._describe(line_items),
            "notes": metadata,
            "callback_url": success_url,
            "callback_method": "get",
            "reminder_enable": False,
        }
        link = await self._call(self.client.payment_link.create, data)
        logger.info(f"Created payment link {link['id']} for {amount} {self.currency} minor units (cancel page {cancel_url})")

        return GatewaySession(
            id=link["id"],
            url=link.get("short_url"),
            payment_status="unpaid",
            amount_total=from_minor_units(link.get("amount", amount)),
            metadata=metadata,
        )

    async def retrieve_session(self, session_id: str) -> GatewaySession:
        """Fetch a checkout session; only a fully paid link reports "paid" """
        link = await self._call(self.client.payment_link.fetch, session_id)

        notes = link.get("notes") or {}
        # Razorpay returns an empty list when no notes were set
        if not isinstance(notes, dict):
            notes = {}

        return GatewaySession(
            id=link["id"],
            url=link.get("short_url"),
            payment_status="paid" if link.get("status") == "paid" else "unpaid",
            amount_total=from_minor_units(link.get("amount_paid") or 0),
            metadata={str(key): str(value) for key, value in notes.items()},
        )

    async def _call(self, method, *args):
        try:
            loop = asyncio.get_event_loop()
            return await loop.run_in_executor(None, method, *args)
        except Exception as e:
            logger.error(f"Razorpay request failed: {str(e)}")
            raise PaymentGatewayException(f"Payment gateway error: {str(e)}")

    @staticmethod
    def _check_metadata(metadata: Dict[str, str]) -> None:
        if len(metadata) > MAX_METADATA_KEYS:
            raise ValidationException("Checkout metadata has too many entries")
        for key, value in metadata.items():
            if len(value) > MAX_METADATA_VALUE_LENGTH:
                raise ValidationException(f"Checkout metadata value for '{key}' is too long")

    def _describe(self, line_items: List[LineItem]) -> str:
        parts = []
        for item in line_items:
            if item.quantity == 1:
                parts.append(f"{item.name} {item.unit_amount:.2f}")
            else:
                parts.append(f"{item.quantity} x {item.name} {item.unit_amount:.2f}")
        description = "; ".join(parts)
        if len(description) > MAX_DESCRIPTION_LENGTH:
            description = description[:MAX_DESCRIPTION_LENGTH - 3] + "..."
        return description


def get_payment_gateway(request: Request) -> RazorpayGateway:
    """Dependency returning the application's payment gateway"""
    return request.app.state.payment_gateway
