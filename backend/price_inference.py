"""
Infer historical per-transaction token prices from the stablecoin or
wrapped-native legs of the same transaction.

A swap of 200 USDC for 100 TKN gives TKN a price of $2 in that tx. When
no stablecoin moved, the net wrapped-native flow times its current price
is used instead. Exact for direct swaps; for multi-leg transactions every
non-stable leg gets the whole USD flow (the split is ambiguous).
"""

import logging
from collections import defaultdict

from chains import stablecoins, wrapped_native
from models import TokenTransfer

logger = logging.getLogger(__name__)

# contract → {tx_hash → inferred USD price per token}
TxPriceMap = dict[str, dict[str, float]]


def group_by_tx(transfers: list[TokenTransfer]) -> dict[str, list[TokenTransfer]]:
    by_tx = defaultdict(list)
    for tx in transfers:
        by_tx[tx.tx_hash].append(tx)
    return by_tx


def net_usd_flow(legs: list[TokenTransfer], wallet: str, chain: str, weth_price: float) -> float:
    """Net USD moving to the wallet in one tx (negative = wallet paid)."""
    stables = stablecoins(chain)
    weth = wrapped_native(chain)
    net_stable = 0.0
    net_weth = 0.0

    for t in legs:
        if t.contract_address in stables:
            amount = t.quantity
            if t.to_address == wallet:
                net_stable += amount
            if t.from_address == wallet:
                net_stable -= amount
        elif t.contract_address == weth:
            amount = t.quantity
            if t.to_address == wallet:
                net_weth += amount
            if t.from_address == wallet:
                net_weth -= amount

    if net_stable != 0:
        return net_stable
    if weth_price > 0:
        return net_weth * weth_price
    return 0.0


def build_tx_price_map(
    transfers: list[TokenTransfer],
    wallet: str,
    chain: str,
    weth_price: float,
) -> TxPriceMap:
    wallet = wallet.lower()
    stables = stablecoins(chain)
    weth = wrapped_native(chain)
    result: TxPriceMap = {}

    for tx_hash, legs in group_by_tx(transfers).items():
        net_usd = net_usd_flow(legs, wallet, chain, weth_price)
        if net_usd == 0:
            continue
        usd_amount = abs(net_usd)

        for t in legs:
            if t.contract_address in stables or t.contract_address == weth:
                continue
            # pass-through legs (neither side is the wallet) carry no price
            if t.to_address != wallet and t.from_address != wallet:
                continue
            token_amount = t.quantity
            if token_amount <= 0:
                continue
            result.setdefault(t.contract_address, {})[tx_hash] = usd_amount / token_amount

    logger.debug("[inference] inferred prices for %d contracts", len(result))
    return result
