"""Razorpay integration for payment processing"""

import razorpay
from razorpay.errors import SignatureVerificationError
from app.config import settings
from app.utils.currency import to_paise
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

REQUIRED_SETTINGS = {
    "RAZORPAY_KEY_ID": "razorpay_key_id",
    "RAZORPAY_KEY_SECRET": "razorpay_key_secret",
    "RAZORPAY_WEBHOOK_SECRET": "razorpay_webhook_secret",
}

# Initialize Razorpay
client = razorpay.Client(auth=(settings.razorpay_key_id, settings.razorpay_key_secret))


def missing_config() -> List[str]:
    """Names of Razorpay environment variables that are not set"""
    return [env for env, attr in REQUIRED_SETTINGS.items() if not getattr(settings, attr)]


def validate_config() -> bool:
    """
    Check that all Razorpay credentials are configured

    Returns:
        True if nothing is missing
    """
    missing = missing_config()
    if missing:
        logger.error(f"Missing Razorpay environment variables: {missing}")
        return False
    return True


async def create_order(
    amount: float,
    receipt: str,
    currency: str = "INR",
    notes: Optional[Dict] = None
) -> Dict:
    """
    Create a Razorpay order

    Args:
        amount: Amount in rupees (converted to paise for the API)
        receipt: Merchant receipt identifier
        currency: Currency code (default: "INR")
        notes: Optional key/value notes attached to the order

    Returns:
        Razorpay order dictionary
    """
    options = {
        "amount": to_paise(amount),
        "currency": currency,
        "receipt": receipt,
        "notes": notes or {},
        "payment_capture": 1,
    }

    try:
        order = client.order.create(data=options)
        logger.info(f"Created Razorpay order: {order['id']}")
        return order
    except razorpay.errors.BadRequestError as e:
        logger.error(f"Razorpay rejected order {receipt}: {str(e)}")
        raise
    except razorpay.errors.ServerError as e:
        logger.error(f"Razorpay server error creating order {receipt}: {str(e)}")
        raise


async def fetch_order(order_id: str) -> Dict:
    """Retrieve a Razorpay order by id"""
    try:
        return client.order.fetch(order_id)
    except razorpay.errors.BadRequestError as e:
        logger.error(f"Razorpay error fetching order {order_id}: {str(e)}")
        raise


async def fetch_payment(payment_id: str) -> Dict:
    """Retrieve a Razorpay payment by id"""
    try:
        return client.payment.fetch(payment_id)
    except razorpay.errors.BadRequestError as e:
        logger.error(f"Razorpay error fetching payment {payment_id}: {str(e)}")
        raise


async def create_refund(payment_id: str, amount: float, notes: Optional[Dict] = None) -> Dict:
    """
    Refund (part of) a captured payment

    Args:
        payment_id: Razorpay payment id
        amount: Refund amount in rupees
        notes: Optional notes

    Returns:
        Razorpay refund dictionary
    """
    try:
        refund = client.payment.refund(payment_id, {
            "amount": to_paise(amount),
            "notes": notes or {},
        })
        logger.info(f"Created refund {refund['id']} for payment {payment_id}")
        return refund
    except razorpay.errors.BadRequestError as e:
        logger.error(f"Razorpay error refunding payment {payment_id}: {str(e)}")
        raise


async def fetch_refunds(payment_id: str) -> Dict:
    """List refunds issued against a payment"""
    try:
        return client.payment.fetch_multiple_refund(payment_id)
    except razorpay.errors.BadRequestError as e:
        logger.error(f"Razorpay error fetching refunds for {payment_id}: {str(e)}")
        raise


def verify_payment_signature(order_id: str, payment_id: str, signature: str) -> bool:
    """
    Verify the checkout signature returned to the browser

    The signature is HMAC-SHA256 of "<order_id>|<payment_id>" keyed with the
    key secret.

    Returns:
        True if the signature is valid
    """
    try:
        client.utility.verify_payment_signature({
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature,
        })
        return True
    except SignatureVerificationError:
        logger.warning(f"Invalid payment signature for order {order_id}")
        return False


def verify_webhook_signature(body: str, signature: str) -> bool:
    """
    Verify a webhook payload against the X-Razorpay-Signature header

    Args:
        body: Raw request body as text
        signature: Header value

    Returns:
        True if the signature is valid
    """
    if not signature or not settings.razorpay_webhook_secret:
        return False
    try:
        client.utility.verify_webhook_signature(body, signature, settings.razorpay_webhook_secret)
        return True
    except SignatureVerificationError:
        logger.warning("Invalid Razorpay webhook signature")
        return False
