import logging
from decimal import Decimal

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

PAYSTACK_INIT_URL = "https://api.paystack.co/transaction/initialize"
PAYSTACK_VERIFY_URL = "https://api.paystack.co/transaction/verify/"
REQUEST_TIMEOUT = 10


class PaymentGatewayError(Exception):
    pass


def _headers():
    return {"Authorization": f"Bearer {settings.PAYSTACK_SECRET_KEY}"}


def initialize_payment(registration):
    """Start a hosted checkout for the registration's outstanding balance."""
    payload = {
        "email": registration.email,
        "amount": int(registration.balance * 100),  # Paystack expects the minor unit
        "currency": registration.program.currency,
        "callback_url": settings.PAYMENT_CALLBACK_URL,
        "metadata": {"registration_number": registration.registration_number},
    }
    try:
        r = requests.post(PAYSTACK_INIT_URL, json=payload, headers=_headers(), timeout=REQUEST_TIMEOUT)
        res = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.error("Paystack init error for %s: %s", registration.registration_number, e)
        raise PaymentGatewayError(f"Paystack init error: {e}") from e

    if not res.get("status"):
        raise PaymentGatewayError(res.get("message", "Paystack init failed"))
    return res["data"]["reference"], res["data"]["authorization_url"]


def verify_payment(reference):
    """Returns (succeeded, amount) where amount is in the major unit."""
    try:
        r = requests.get(f"{PAYSTACK_VERIFY_URL}{reference}", headers=_headers(), timeout=REQUEST_TIMEOUT)
        res = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.error("Paystack verify error for %s: %s", reference, e)
        raise PaymentGatewayError(f"Paystack verify error: {e}") from e

    data = res.get("data") or {}
    succeeded = bool(res.get("status")) and data.get("status") == "success"
    amount = data.get("amount")
    return succeeded, (Decimal(amount) / 100 if amount is not None else None)
