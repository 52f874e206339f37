"""
Razorpay integration check: configuration, paise conversion, order
creation and retrieval with the configured test keys

Run: python scripts/check_razorpay.py
"""

import asyncio
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import razorpay
from app.core import razorpay_client
from app.utils.currency import to_paise, to_rupees, format_inr
import logging

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

TEST_AMOUNTS = [1, 99.5, 499, 1680, 12345.67]


async def main() -> bool:
    print("=" * 60)
    print("  Razorpay Check")
    print("=" * 60 + "\n")

    print("1. Configuration")
    missing = razorpay_client.missing_config()
    if missing:
        logger.error(f"❌ Missing: {', '.join(missing)}")
        return False
    logger.info("✅ All Razorpay variables set")

    print("\n2. Currency conversion")
    for amount in TEST_AMOUNTS:
        paise = to_paise(amount)
        back = to_rupees(paise)
        ok = abs(back - amount) < 0.01
        logger.info(f"   {format_inr(amount)} -> {paise} paise -> {back} {'✅' if ok else '❌'}")
        if not ok:
            return False

    try:
        print("\n3. Create order")
        order = await razorpay_client.create_order(
            amount=100,
            receipt=f"check_{int(time.time())}",
            notes={"purpose": "integration check"},
        )
        logger.info(f"✅ Created {order['id']}: {order['amount']} {order['currency']} ({order['status']})")

        print("\n4. Fetch order")
        fetched = await razorpay_client.fetch_order(order["id"])
        logger.info(f"✅ Fetched {fetched['id']}: amount_due={fetched.get('amount_due')}")
        return fetched["id"] == order["id"]
    except (razorpay.errors.BadRequestError, razorpay.errors.ServerError) as e:
        logger.error(f"❌ Razorpay error: {e}")
        return False


if __name__ == "__main__":
    if not asyncio.run(main()):
        sys.exit(1)
