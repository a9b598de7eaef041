"""Example: Wrap a fillOrder call in a taker-signed 0x transaction and submit it."""

from __future__ import annotations

import json
import logging
import os
import sys
import time

from dotenv import load_dotenv

from zrx_helpers import (
    LocalSigner,
    SignedOrder,
    Transaction,
    ZeroExHelper,
    ZeroExHelperConfig,
    generate_pseudo_random_salt,
)

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

TX_TTL_SECONDS = 300


def main() -> None:
    """Fill the signed order read from stdin on behalf of the taker."""

    config = ZeroExHelperConfig.from_env()
    taker_key = os.getenv("ZRX_TAKER_PRIVATE_KEY")
    if not taker_key:
        raise ValueError("ZRX_TAKER_PRIVATE_KEY not found in environment variables")

    helper = ZeroExHelper(config)
    helper.connect()
    taker = LocalSigner.from_keys(taker_key)

    signed_order = SignedOrder.from_dict(json.load(sys.stdin))
    fill_amount = signed_order.taker_asset_amount
    helper.validate_fill(signed_order, fill_amount)

    gas_price = helper.web3.eth.gas_price
    tx = Transaction(
        salt=generate_pseudo_random_salt(),
        expiration_time_seconds=int(time.time()) + TX_TTL_SECONDS,
        gas_price=gas_price,
        signer_address=taker.addresses[0],
        data=helper.get_fill_order_call_data(
            signed_order.order, fill_amount, signed_order.signature
        ),
    )
    signed_tx = helper.sign_transaction(taker, tx)
    print(signed_tx.to_json())

    result = helper.execute_signed_transaction(signed_tx)
    print(f"Submitted: {result['tx_hash']} (block {result['block_number']})")


if __name__ == "__main__":
    main()
