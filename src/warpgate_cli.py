"""CLI entrypoint for pool quotes and router call parameters."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from chain.client import LedgerClient
from chain.errors import ChainError
from chain.payloads import PayloadBuilder
from chain.reader import LedgerPoolReader
from config import Settings, get_env, load_settings
from core.base_types import CurrencyAmount, Token
from core.errors import PricingError
from core.fraction import Percent
from core.serializer import CanonicalSerializer
from pricing.pricing_engine import (
    AddLiquidityRequest,
    PricingEngine,
    RemoveLiquidityRequest,
    SwapRequest,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AMM pricing and router parameters")
    subparsers = parser.add_subparsers(dest="command", required=True)
    token_help = "Token as ADDRESS:DECIMALS[:SYMBOL]"

    pool_info = subparsers.add_parser("pool-info", help="Show pool reserves and fee")
    pool_info.add_argument("token_a", help=token_help)
    pool_info.add_argument("token_b", help=token_help)

    for name, help_text in (
        ("quote", "Best route and quoted amounts"),
        ("swap", "Swap call parameters"),
    ):
        command = subparsers.add_parser(name, help=help_text)
        command.add_argument("token_in", help=token_help)
        command.add_argument("token_out", help=token_help)
        command.add_argument(
            "amount", help="Human amount (input, or output with --exact-out)"
        )
        command.add_argument(
            "--exact-out", action="store_true", help="Treat amount as exact output"
        )
        command.add_argument(
            "--base",
            action="append",
            default=[],
            help="Intermediate token allowed in routes (repeatable)",
        )
        command.add_argument("--max-hops", type=int, default=3, help="Route length cap")

    swap = subparsers.choices["swap"]
    swap.add_argument("--slippage", help="Allowed slippage in percent, e.g. 0.5")
    swap.add_argument("--payload", action="store_true", help="Print entry payload")

    add = subparsers.add_parser("add-liquidity", help="Add-liquidity call parameters")
    add.add_argument("token_a", help=token_help)
    add.add_argument("token_b", help=token_help)
    add.add_argument("amount_a", help="Human amount of token A")
    add.add_argument("--amount-b", help="Human amount of token B (new pools)")
    add.add_argument("--fee-bps", type=int, help="Pool fee in basis points (new pools)")
    add.add_argument("--slippage", help="Allowed slippage in percent, e.g. 0.5")
    add.add_argument("--payload", action="store_true", help="Print entry payload")

    remove = subparsers.add_parser(
        "remove-liquidity", help="Remove-liquidity call parameters"
    )
    remove.add_argument("token_a", help=token_help)
    remove.add_argument("token_b", help=token_help)
    remove.add_argument("lp_amount", help="Human amount of LP tokens")
    remove.add_argument("--slippage", help="Allowed slippage in percent, e.g. 0.5")
    remove.add_argument("--payload", action="store_true", help="Print entry payload")

    return parser


def parse_token(spec: str, chain_id: int) -> Token:
    """Parse ADDRESS:DECIMALS[:SYMBOL]; ADDRESS may be a ``a::m::T`` type tag."""
    head, _, last = spec.rpartition(":")
    symbol = None
    if not last.isdigit():
        symbol = last
        head, _, last = head.rpartition(":")
    if not last.isdigit() or not head or head.endswith(":"):
        raise ValueError(f"invalid token {spec!r}, expected ADDRESS:DECIMALS[:SYMBOL]")
    return Token(chain_id=chain_id, address=head, decimals=int(last), symbol=symbol)


def _build_engine(settings: Settings) -> PricingEngine:
    swap_address = get_env("SWAP_ADDRESS", required=True)
    client = LedgerClient(
        list(settings.node_urls),
        timeout=settings.rpc_timeout,
        max_retries=settings.rpc_max_retries,
    )
    return PricingEngine(
        LedgerPoolReader(client, swap_address),
        chain_id=settings.chain_id,
        swap_address=swap_address,
        default_slippage=Percent.from_human(settings.default_slippage),
    )


def _emit(obj: object) -> None:
    print(CanonicalSerializer.serialize(obj).decode("utf-8"))


def run(args: argparse.Namespace, engine: PricingEngine) -> object:
    """Execute one parsed command and return what should be printed."""
    chain_id = engine.chain_id
    payloads = PayloadBuilder(engine.swap_address)

    if args.command == "pool-info":
        return engine.get_pool_info(
            parse_token(args.token_a, chain_id), parse_token(args.token_b, chain_id)
        )

    if args.command in ("quote", "swap"):
        token_in = parse_token(args.token_in, chain_id)
        token_out = parse_token(args.token_out, chain_id)
        bases = tuple(parse_token(base, chain_id) for base in args.base)

        if args.command == "quote":
            amount_token = token_out if args.exact_out else token_in
            quote = engine.quote(
                token_in,
                token_out,
                CurrencyAmount.from_human(amount_token, args.amount),
                exact_in=not args.exact_out,
                bases=bases,
                max_hops=args.max_hops,
            )
            trade = quote.trade
            return {
                "trade_type": trade.trade_type,
                "input_amount": trade.input_amount,
                "output_amount": trade.output_amount,
                "path": list(trade.route.path),
                "execution_price": trade.execution_price.to_significant(6),
                "price_impact": trade.price_impact.to_fixed(2),
                "routes_returned": quote.routes_returned,
            }

        params = engine.swap(
            SwapRequest(
                token_in=token_in,
                token_out=token_out,
                amount=args.amount,
                exact_in=not args.exact_out,
                slippage=args.slippage,
                bases=bases,
                max_hops=args.max_hops,
            )
        )
        return payloads.swap(params).to_dict() if args.payload else params

    if args.command == "add-liquidity":
        params = engine.add_liquidity(
            AddLiquidityRequest(
                token_a=parse_token(args.token_a, chain_id),
                token_b=parse_token(args.token_b, chain_id),
                amount_a=args.amount_a,
                amount_b=args.amount_b,
                fee_bps=args.fee_bps,
                slippage=args.slippage,
            )
        )
        return payloads.add_liquidity(params).to_dict() if args.payload else params

    if args.command == "remove-liquidity":
        params = engine.remove_liquidity(
            RemoveLiquidityRequest(
                token_a=parse_token(args.token_a, chain_id),
                token_b=parse_token(args.token_b, chain_id),
                lp_amount=args.lp_amount,
                slippage=args.slippage,
            )
        )
        return payloads.remove_liquidity(params).to_dict() if args.payload else params

    raise ValueError(f"unknown command {args.command!r}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s |%(levelname)s |%(message)s",
    )

    try:
        _emit(run(args, _build_engine(settings)))
    except (PricingError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(2)
    except ChainError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
