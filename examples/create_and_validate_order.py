"""Example: Create, sign and validate a 0x order for a known taker."""

from __future__ import annotations

import logging
import os
import time

from dotenv import load_dotenv

from zrx_helpers import (
    NULL_ADDRESS,
    LocalSigner,
    ValidationRejected,
    ZeroExHelper,
    ZeroExHelperConfig,
    sign_order,
)

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

MAKER_AMOUNT = 10**18
TAKER_AMOUNT = 2 * 10**18
ORDER_TTL_SECONDS = 3600


def main() -> None:
    """Create an ERC-20 swap order on the configured chain and validate a full fill."""

    config = ZeroExHelperConfig.from_env()
    maker_key = os.getenv("ZRX_MAKER_PRIVATE_KEY")
    if not maker_key:
        raise ValueError("ZRX_MAKER_PRIVATE_KEY not found in environment variables")
    taker = os.getenv("ZRX_TAKER_ADDRESS", NULL_ADDRESS)

    helper = ZeroExHelper(config)
    helper.connect()
    signer = LocalSigner.from_keys(maker_key)
    addresses = helper.contract_addresses

    order = helper.create_order(
        maker=signer.addresses[0],
        taker=taker,
        sender=NULL_ADDRESS,
        fee_recipient=NULL_ADDRESS,
        maker_asset=addresses.weth9,
        taker_asset=addresses.zrx_token,
        maker_amount=MAKER_AMOUNT,
        taker_amount=TAKER_AMOUNT,
        maker_fee=0,
        taker_fee=0,
        maker_fee_asset=NULL_ADDRESS,
        taker_fee_asset=NULL_ADDRESS,
        expiration_time_seconds=int(time.time()) + ORDER_TTL_SECONDS,
    )
    signed_order = sign_order(signer, order)
    print(f"Order hash: {order.compute_order_hash().to_0x_hex()}")

    try:
        helper.validate_fill(signed_order, TAKER_AMOUNT)
    except ValidationRejected as exc:
        print(f"Order rejected ({exc.code}): {exc.message}")
        return

    print("Order is fillable")


if __name__ == "__main__":
    main()
