"""
ISD-AS and interface identifiers.

Textual forms:
- ISD:       decimal, 16 bit ("1")
- AS number: decimal up to the BGP range ("11") or three
             colon-separated 16 bit hex groups ("ff00:0:110")
- ISD-AS:    "<isd>-<as>"
- interface: decimal, 1..65535 (0 is reserved)
"""

import re
from dataclasses import dataclass

from scionsim.errors import InvalidIdentifier, InvalidInterfaceId

MAX_ISD = 0xFFFF
MAX_BGP_ASN = 0xFFFF_FFFF
MAX_ASN = 0xFFFF_FFFF_FFFF
MAX_INTERFACE_ID = 0xFFFF

_DECIMAL = re.compile(r"[0-9]+")
_HEX_GROUP = re.compile(r"[0-9a-fA-F]{1,4}")


def _parse_isd_part(text: str) -> int:
    if not _DECIMAL.fullmatch(text):
        raise InvalidIdentifier(f"ISD '{text}' is not a decimal number")
    isd = int(text)
    if isd > MAX_ISD:
        raise InvalidIdentifier(f"ISD {isd} out of range (max {MAX_ISD})")
    return isd


def _parse_asn_part(text: str) -> int:
    if _DECIMAL.fullmatch(text):
        asn = int(text)
        if asn > MAX_BGP_ASN:
            raise InvalidIdentifier(
                f"decimal AS number {asn} out of range (max {MAX_BGP_ASN})"
            )
        return asn

    groups = text.split(":")
    if len(groups) != 3 or not all(_HEX_GROUP.fullmatch(g) for g in groups):
        raise InvalidIdentifier(
            f"AS number '{text}' is neither decimal nor three hex groups"
        )

    asn = 0
    for group in groups:
        asn = (asn << 16) | int(group, 16)
    return asn


@dataclass(frozen=True, order=True)
class IsdAsn:
    """Two-part hierarchical AS identifier."""

    isd: int
    asn: int

    @classmethod
    def parse(cls, text: str) -> "IsdAsn":
        if not isinstance(text, str):
            raise InvalidIdentifier(f"expected an ISD-AS string, got {text!r}")

        parts = text.strip().split("-")
        if len(parts) != 2:
            raise InvalidIdentifier(
                f"'{text}' must have exactly one '-' between ISD and AS"
            )

        return cls(isd=_parse_isd_part(parts[0]), asn=_parse_asn_part(parts[1]))

    def as_str(self) -> str:
        if self.asn <= MAX_BGP_ASN:
            return str(self.asn)
        return ":".join(
            f"{(self.asn >> shift) & 0xFFFF:x}" for shift in (32, 16, 0)
        )

    def __str__(self) -> str:
        return f"{self.isd}-{self.as_str()}"


def parse_isd(text: str) -> int:
    """
    Parse an isolation-domain identifier.

    Accepts the bare ISD ("1") and the wildcard ISD-AS form ("1-0").
    ISD 0 is the wildcard ISD and never names a served domain.
    """
    if not isinstance(text, str):
        raise InvalidIdentifier(f"expected an ISD string, got {text!r}")

    text = text.strip()
    if "-" in text:
        isd_as = IsdAsn.parse(text)
        if isd_as.asn != 0:
            raise InvalidIdentifier(
                f"'{text}' names an AS, expected an ISD or '<isd>-0'"
            )
        isd = isd_as.isd
    else:
        isd = _parse_isd_part(text)

    if isd == 0:
        raise InvalidIdentifier("ISD 0 is the wildcard ISD")
    return isd


def parse_interface_id(value: int | str) -> int:
    """Parse a strictly positive 16 bit interface identifier."""
    if isinstance(value, bool):
        raise InvalidInterfaceId(f"interface ID must be a number, got {value!r}")

    if isinstance(value, str):
        if not _DECIMAL.fullmatch(value.strip()):
            raise InvalidInterfaceId(f"interface ID '{value}' is not a number")
        value = int(value.strip())
    elif not isinstance(value, int):
        raise InvalidInterfaceId(f"interface ID must be a number, got {value!r}")

    if value == 0:
        raise InvalidInterfaceId("interface ID must be non-zero")
    if value < 0 or value > MAX_INTERFACE_ID:
        raise InvalidInterfaceId(
            f"interface ID {value} out of range (1..{MAX_INTERFACE_ID})"
        )
    return value
