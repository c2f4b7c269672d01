"""
Address classification for receiver validation.

Only taproot (P2TR, witness v1 with a 32-byte program) receivers can hold
CAT-20 token outputs.
"""

from __future__ import annotations

from enum import Enum

import base58
import bech32
from embit import bech32 as bech32m

from catcore.errors import InvalidReceiver

HRP_BY_NETWORK = {"mainnet": "bc", "testnet": "tb", "signet": "tb", "regtest": "bcrt"}


class AddressType(str, Enum):
    P2PKH = "p2pkh"
    P2SH = "p2sh"
    P2WPKH = "p2wpkh"
    P2WSH = "p2wsh"
    P2TR = "p2tr"


def _decode_segwit(address: str, hrp: str) -> tuple[int, bytes]:
    # Witness version is the first data character after the separator
    version_char = address[len(hrp) + 1 : len(hrp) + 2].lower()
    if version_char == bech32.CHARSET[0]:
        witver, witprog = bech32.decode(hrp, address)
    else:
        # v1+ programs must carry the bech32m checksum
        witver, witprog = bech32m.decode(hrp, address)
    if witver is None or witprog is None:
        raise ValueError(f"Invalid bech32 address: {address}")
    return witver, bytes(witprog)


def address_type(address: str, network: str = "mainnet") -> AddressType:
    """
    Decode an address and return its class.

    Raises:
        ValueError: if the address does not decode for the given network
    """
    hrp = HRP_BY_NETWORK[network]

    if address.lower().startswith(hrp + "1"):
        witver, witprog = _decode_segwit(address, hrp)
        if witver == 0 and len(witprog) == 20:
            return AddressType.P2WPKH
        if witver == 0 and len(witprog) == 32:
            return AddressType.P2WSH
        if witver == 1 and len(witprog) == 32:
            return AddressType.P2TR
        raise ValueError(f"Unsupported witness program v{witver} ({len(witprog)} bytes)")

    try:
        decoded = base58.b58decode_check(address)
    except ValueError as e:
        raise ValueError(f"Invalid address: {address}") from e

    if len(decoded) != 21:
        raise ValueError(f"Invalid address payload length: {len(decoded)}")

    version = decoded[0]
    mainnet = network == "mainnet"
    if version == (0x00 if mainnet else 0x6F):
        return AddressType.P2PKH
    if version == (0x05 if mainnet else 0xC4):
        return AddressType.P2SH

    raise ValueError(f"Unknown address version {version} for {network}")


def validate_receiver(address: str, network: str = "mainnet") -> str:
    """Return the address if it is a taproot address, raise InvalidReceiver otherwise."""
    try:
        kind = address_type(address, network)
    except (ValueError, KeyError) as e:
        raise InvalidReceiver(f'Invalid receiver address: "{address}"') from e

    if kind is not AddressType.P2TR:
        raise InvalidReceiver(f"Invalid address type: {kind.value}")

    return address


def address_to_script(address: str, network: str = "mainnet") -> str:
    """Locking script (hex) for an address."""
    kind = address_type(address, network)

    if kind in (AddressType.P2WPKH, AddressType.P2WSH, AddressType.P2TR):
        witver, witprog = _decode_segwit(address, HRP_BY_NETWORK[network])
        # OP_0 / OP_1 followed by a direct push of the program
        opcode = 0x00 if witver == 0 else 0x50 + witver
        return (bytes([opcode, len(witprog)]) + witprog).hex()

    payload = base58.b58decode_check(address)[1:]
    if kind is AddressType.P2PKH:
        return (bytes([0x76, 0xA9, 0x14]) + payload + bytes([0x88, 0xAC])).hex()
    return (bytes([0xA9, 0x14]) + payload + bytes([0x87])).hex()
