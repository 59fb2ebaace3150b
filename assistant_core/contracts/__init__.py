"""
Wire contracts for every payload exchanged with the assistant backend.

Use ``decode`` on anything received and ``encode`` on anything sent; both
raise ``SchemaViolation`` on a mismatch.
"""

from assistant_core.contracts.registry import (
    CONTRACTS,
    Direction,
    decode,
    encode,
    get_contract,
    validate_patch,
)
from assistant_core.core.exceptions import SchemaViolation

__all__ = [
    "CONTRACTS",
    "Direction",
    "SchemaViolation",
    "decode",
    "encode",
    "get_contract",
    "validate_patch",
]
