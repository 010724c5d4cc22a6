"""Chain wallet address checks."""

from web3 import Web3

from safetour.common.exceptions import ValidationError


def normalize_wallet_address(address: str, field: str = "wallet address") -> str:
    """Return the EIP-55 checksummed form of an address.

    Raises ValidationError for anything that is not a 20-byte hex address,
    or a mixed-case address whose checksum does not match.
    """
    if not isinstance(address, str) or not Web3.is_address(address.strip()):
        raise ValidationError(f"Malformed {field}: {address!r}")
    return Web3.to_checksum_address(address.strip())
