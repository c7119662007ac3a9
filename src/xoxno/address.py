"""Bech32 account addresses (``erd1…``) and their 32-byte public keys."""

from __future__ import annotations

from bech32 import bech32_decode, bech32_encode, convertbits

from xoxno.exceptions import CodecError

ADDRESS_HRP = "erd"
PUBKEY_LENGTH = 32


def address_to_pubkey(address: str) -> bytes:
    """Decode a bech32 address into its public key."""
    hrp, data = bech32_decode(address)
    if hrp is None or data is None:
        raise CodecError(f"Invalid bech32 address: {address!r}")
    if hrp != ADDRESS_HRP:
        raise CodecError(f"Unexpected address prefix {hrp!r} in {address!r}")
    raw = convertbits(data, 5, 8, False)
    if raw is None or len(raw) != PUBKEY_LENGTH:
        raise CodecError(f"Address {address!r} does not hold a {PUBKEY_LENGTH}-byte public key")
    return bytes(raw)


def pubkey_to_address(pubkey: bytes) -> str:
    if len(pubkey) != PUBKEY_LENGTH:
        raise CodecError(f"Public key must be {PUBKEY_LENGTH} bytes, got {len(pubkey)}")
    return bech32_encode(ADDRESS_HRP, convertbits(pubkey, 8, 5))
