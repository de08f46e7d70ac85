from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from chain.payloads import PayloadBuilder  # noqa: E402
from chain.reader import StaticPoolReader  # noqa: E402
from core.base_types import CurrencyAmount, Token  # noqa: E402
from core.constants import ChainId  # noqa: E402
from core.serializer import CanonicalSerializer  # noqa: E402
from pricing.pair import Pair  # noqa: E402
from pricing.pricing_engine import (  # noqa: E402
    AddLiquidityRequest,
    PricingEngine,
    RemoveLiquidityRequest,
    SwapRequest,
)

DEMO_SWAP_ADDRESS = "0xa11ce"


def _snapshot_reader(move: Token, usdc: Token, weth: Token) -> StaticPoolReader:
    lp_move_usdc = Pair.get_address(move, usdc, DEMO_SWAP_ADDRESS)
    return StaticPoolReader(
        {
            (move, usdc): (5_000_000_00000000, 2_500_000_000000, 25),
            (move, weth): (8_000_000_00000000, 1_500_00000000, 30),
            (weth, usdc): (900_00000000, 2_880_000_000000, 25),
        },
        supplies={lp_move_usdc: 3_535_533_90593273},
        swap_address=DEMO_SWAP_ADDRESS,
    )


def _print(title: str, obj: object) -> None:
    print(f"{title}: {CanonicalSerializer.serialize(obj).decode('utf-8')}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Demo: offline pricing over a snapshot")
    parser.add_argument("--amount", default="1000", help="MOVE amount to sell")
    parser.add_argument("--slippage", default="0.5", help="Slippage in percent")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s |%(levelname)s |%(message)s",
    )

    move = Token(ChainId.MOVE_MAINNET, "0xa", 8, "MOVE", "Movement")
    usdc = Token(ChainId.MOVE_MAINNET, "0x83121c9f", 6, "USDC", "USD Coin")
    weth = Token(ChainId.MOVE_MAINNET, "0x908828f4", 8, "WETH", "Wrapped Ether")
    engine = PricingEngine(
        _snapshot_reader(move, usdc, weth), ChainId.MOVE_MAINNET, DEMO_SWAP_ADDRESS
    )
    payloads = PayloadBuilder(DEMO_SWAP_ADDRESS)

    _print("pool MOVE/USDC", engine.get_pool_info(move, usdc))

    quote = engine.quote(
        move,
        usdc,
        CurrencyAmount.from_human(move, args.amount),
        bases=(weth,),
    )
    trade = quote.trade
    print(
        f"best route: {trade.route!r} out={trade.output_amount} "
        f"price={trade.execution_price.to_significant(6)} "
        f"impact={trade.price_impact} ({quote.routes_returned} routes kept)"
    )

    swap = engine.swap(
        SwapRequest(move, usdc, args.amount, slippage=args.slippage, bases=(weth,))
    )
    _print("swap", swap)
    _print("swap payload", payloads.swap(swap).to_dict())

    add = engine.add_liquidity(
        AddLiquidityRequest(move, usdc, args.amount, slippage=args.slippage)
    )
    _print("add liquidity", add)

    remove = engine.remove_liquidity(
        RemoveLiquidityRequest(move, usdc, "100", slippage=args.slippage)
    )
    _print("remove liquidity", remove)


if __name__ == "__main__":
    main()
