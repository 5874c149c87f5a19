"""
SCION AS topology.

TopologyBuilder accumulates ASes and links; build() freezes the result
into an immutable ScionTopology that can be handed to the runtime.
Links reference ASes by identifier value.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from scionsim.errors import (
    DuplicateAs,
    InvalidIdentifier,
    InvalidLinkSpec,
    UnknownAsInLink,
)
from scionsim.identifiers import IsdAsn

logger = logging.getLogger(__name__)


class LinkType(Enum):
    CORE = "core"
    PARENT_CHILD = "parent_child"


@dataclass(frozen=True)
class ScionAs:
    isd_as: IsdAsn
    is_core: bool = False


@dataclass(frozen=True)
class ScionLink:
    """Link between two ASes. For PARENT_CHILD links ``a`` is the parent."""

    a: IsdAsn
    b: IsdAsn
    link_type: LinkType

    def __str__(self) -> str:
        return f"{self.a}:{self.b} ({self.link_type.value})"


def parse_link_spec(spec: str) -> tuple[IsdAsn, IsdAsn]:
    """
    Split a link spec "<isd-as>:<isd-as>" into its two endpoints.

    Hex AS numbers contain colons themselves, so every colon is tried as
    the split point; exactly one must yield two valid identifiers.
    """
    if not isinstance(spec, str):
        raise InvalidLinkSpec(f"expected a link string, got {spec!r}")

    text = spec.strip()
    candidates = []
    for i, char in enumerate(text):
        if char != ":":
            continue
        try:
            a = IsdAsn.parse(text[:i])
            b = IsdAsn.parse(text[i + 1 :])
        except InvalidIdentifier:
            continue
        candidates.append((a, b))

    if not candidates:
        raise InvalidLinkSpec(f"'{spec}' is not of the form <isd-as>:<isd-as>")
    if len(candidates) > 1:
        raise InvalidLinkSpec(f"'{spec}' can be split in more than one way")

    a, b = candidates[0]
    if a == b:
        raise InvalidLinkSpec(f"'{spec}' links an AS to itself")
    return a, b


@dataclass(frozen=True)
class ScionTopology:
    """Immutable AS graph."""

    ases: tuple[ScionAs, ...] = ()
    links: tuple[ScionLink, ...] = ()

    def get_as(self, isd_as: IsdAsn) -> ScionAs | None:
        for scion_as in self.ases:
            if scion_as.isd_as == isd_as:
                return scion_as
        return None

    def core_ases(self) -> list[ScionAs]:
        return [a for a in self.ases if a.is_core]

    def to_dict(self) -> dict:
        return {
            "ases": [
                {"isd_as": str(a.isd_as), "is_core": a.is_core} for a in self.ases
            ],
            "links": [
                {"a": str(link.a), "b": str(link.b), "type": link.link_type.value}
                for link in self.links
            ],
        }


class TopologyBuilder:
    """Additive builder for a ScionTopology."""

    def __init__(self):
        self._ases: dict[IsdAsn, ScionAs] = {}
        self._links: list[ScionLink] = []

    # ------------------------------------------------------------------

    def add_as(self, isd_as: IsdAsn, is_core: bool = False) -> ScionAs:
        if isd_as in self._ases:
            raise DuplicateAs(f"AS {isd_as} is already part of the topology")

        scion_as = ScionAs(isd_as=isd_as, is_core=is_core)
        self._ases[isd_as] = scion_as
        return scion_as

    def add_link(self, link_spec: str) -> ScionLink:
        a, b = parse_link_spec(link_spec)

        for endpoint in (a, b):
            if endpoint not in self._ases:
                raise UnknownAsInLink(
                    f"link '{link_spec}' references unknown AS {endpoint}"
                )

        a_core = self._ases[a].is_core
        b_core = self._ases[b].is_core

        if a_core and b_core:
            link = ScionLink(a=a, b=b, link_type=LinkType.CORE)
        elif b_core and not a_core:
            link = ScionLink(a=b, b=a, link_type=LinkType.PARENT_CHILD)
        else:
            link = ScionLink(a=a, b=b, link_type=LinkType.PARENT_CHILD)

        self._links.append(link)
        return link

    # ------------------------------------------------------------------

    def __contains__(self, isd_as: IsdAsn) -> bool:
        return isd_as in self._ases

    @property
    def as_count(self) -> int:
        return len(self._ases)

    @property
    def link_count(self) -> int:
        return len(self._links)

    def clone(self) -> "TopologyBuilder":
        other = TopologyBuilder()
        other._ases = dict(self._ases)
        other._links = list(self._links)
        return other

    def build(self) -> ScionTopology:
        return ScionTopology(ases=tuple(self._ases.values()), links=tuple(self._links))


def build_topology(config) -> ScionTopology:
    """Build the topology from a TopologyConfig (ASes first, then links)."""
    builder = TopologyBuilder()

    for i, as_config in enumerate(config.ases):
        field = f"topology.ases[{i}].isd_as"
        try:
            builder.add_as(IsdAsn.parse(as_config.isd_as), as_config.is_core)
        except (InvalidIdentifier, DuplicateAs) as e:
            raise e.at(field) from None

    for i, link_spec in enumerate(config.links):
        try:
            builder.add_link(link_spec)
        except (InvalidLinkSpec, UnknownAsInLink) as e:
            raise e.at(f"topology.links[{i}]") from None

    topology = builder.build()
    logger.info(
        "Built topology with %d AS(es) and %d link(s)",
        len(topology.ases),
        len(topology.links),
    )
    return topology
