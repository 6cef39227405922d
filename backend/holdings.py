from chains import wrapped_native
from models import TokenTransfer


def scan_held_contracts(transfers: list[TokenTransfer], wallet: str, chain: str) -> set[str]:
    """Contracts with net positive inflow to `wallet`, plus the chain's
    wrapped native token (always needed for swap price inference).

    Single pass in raw integer units, so there is no overflow or rounding.
    Used to keep price lookups to tokens the wallet still holds.
    """
    wallet = wallet.lower()
    net: dict[str, int] = {}

    for tx in transfers:
        value = tx.raw_amount
        if value is None:
            continue
        contract = tx.contract_address
        # if/elif so a self-transfer is counted once, not in both directions
        if tx.to_address == wallet:
            net[contract] = net.get(contract, 0) + value
        elif tx.from_address == wallet:
            net[contract] = net.get(contract, 0) - value

    held = {contract for contract, qty in net.items() if qty > 0}
    held.add(wrapped_native(chain))
    return held
