"""Identifier types for SCION network elements."""

from scionsim.identifiers.isd_as import (
    IsdAsn,
    parse_interface_id,
    parse_isd,
)

__all__ = [
    "IsdAsn",
    "parse_interface_id",
    "parse_isd",
]
