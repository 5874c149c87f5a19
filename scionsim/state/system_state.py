"""
Logical model of the simulated SCION network.

Holds the topology and every simulated endpoint (SNAPs with their data
planes, endhost APIs, routers), each keyed by its generated identifier.
Listening addresses are not part of this model; see io_config.
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping

from scionsim.identifiers import IsdAsn
from scionsim.network.addressing import IPNetwork, SocketAddr
from scionsim.network.topology import ScionTopology

EntityId = int


# ----------------------------------------------------------------
# Entities
# ----------------------------------------------------------------


@dataclass(frozen=True)
class DataPlane:
    """SNAP data plane scoped to one AS."""

    id: EntityId
    isd_as: IsdAsn
    address_ranges: tuple[IPNetwork, ...]


@dataclass(frozen=True)
class AccessPoint:
    """SCION network access point (SNAP)."""

    id: EntityId
    data_planes: tuple[DataPlane, ...]


@dataclass(frozen=True)
class EndhostApi:
    id: EntityId
    isds: tuple[int, ...]


@dataclass(frozen=True)
class NextHopAddressing:
    local_addresses: tuple[IPNetwork, ...] = ()
    next_hops: Mapping[str, SocketAddr] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def to_dict(self) -> dict:
        return {
            "local_addresses": [str(n) for n in self.local_addresses],
            "next_hops": {k: str(v) for k, v in self.next_hops.items()},
        }


@dataclass(frozen=True)
class SnapInterfaceAddressing:
    snap_data_plane_excludes: tuple[IPNetwork, ...] = ()
    snap_data_plane_interfaces: Mapping[str, SocketAddr] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def to_dict(self) -> dict:
        return {
            "snap_data_plane_excludes": [str(n) for n in self.snap_data_plane_excludes],
            "snap_data_plane_interfaces": {
                k: str(v) for k, v in self.snap_data_plane_interfaces.items()
            },
        }


RouterAddressing = NextHopAddressing | SnapInterfaceAddressing


@dataclass(frozen=True)
class Router:
    id: EntityId
    isd_as: IsdAsn
    interfaces: tuple[int, ...]
    addressing: RouterAddressing


# ----------------------------------------------------------------
# Frozen aggregate
# ----------------------------------------------------------------


@dataclass(frozen=True)
class SystemState:
    """Immutable model handed to the runtime."""

    topology: ScionTopology
    access_points: Mapping[EntityId, AccessPoint]
    endhost_apis: Mapping[EntityId, EndhostApi]
    routers: Mapping[EntityId, Router]
    created_at: datetime = field(default_factory=datetime.now)

    # ----------------------------------------------------------------
    # Queries
    # ----------------------------------------------------------------

    def data_planes(self) -> dict[EntityId, DataPlane]:
        return {
            dp.id: dp for ap in self.access_points.values() for dp in ap.data_planes
        }

    def entity_ids(self) -> list[EntityId]:
        """All generated identifiers in assignment order."""
        ids = list(self.access_points)
        ids.extend(self.data_planes())
        ids.extend(self.endhost_apis)
        ids.extend(self.routers)
        return sorted(ids)

    def describe(self, entity_id: EntityId) -> dict[str, Any] | None:
        """JSON-friendly description of a single entity."""
        if entity_id in self.access_points:
            ap = self.access_points[entity_id]
            return {
                "kind": "snap",
                "id": ap.id,
                "data_planes": [self._describe_data_plane(dp) for dp in ap.data_planes],
            }

        data_plane = self.data_planes().get(entity_id)
        if data_plane is not None:
            return self._describe_data_plane(data_plane)

        if entity_id in self.endhost_apis:
            api = self.endhost_apis[entity_id]
            return {"kind": "endhost_api", "id": api.id, "isds": list(api.isds)}

        if entity_id in self.routers:
            router = self.routers[entity_id]
            return {
                "kind": "router",
                "id": router.id,
                "isd_as": str(router.isd_as),
                "interfaces": list(router.interfaces),
                **router.addressing.to_dict(),
            }

        return None

    @staticmethod
    def _describe_data_plane(dp: DataPlane) -> dict[str, Any]:
        return {
            "kind": "snap_data_plane",
            "id": dp.id,
            "isd_as": str(dp.isd_as),
            "address_ranges": [str(n) for n in dp.address_ranges],
        }

    # ----------------------------------------------------------------
    # Status reporting
    # ----------------------------------------------------------------

    def summary(self) -> dict[str, Any]:
        """High-level summary of the simulated network."""
        return {
            "created_at": self.created_at.isoformat(),
            "topology": {
                "ases": len(self.topology.ases),
                "core_ases": len(self.topology.core_ases()),
                "links": len(self.topology.links),
            },
            "entities": {
                "snaps": len(self.access_points),
                "snap_data_planes": len(self.data_planes()),
                "endhost_apis": len(self.endhost_apis),
                "routers": len(self.routers),
            },
            "data_planes_per_as": self._count_data_planes_per_as(),
            "routers_per_as": self._count_routers_per_as(),
        }

    def _count_data_planes_per_as(self) -> dict[str, int]:
        counts = {}
        for dp in self.data_planes().values():
            key = str(dp.isd_as)
            counts[key] = counts.get(key, 0) + 1
        return counts

    def _count_routers_per_as(self) -> dict[str, int]:
        counts = {}
        for router in self.routers.values():
            key = str(router.isd_as)
            counts[key] = counts.get(key, 0) + 1
        return counts


# ----------------------------------------------------------------
# Builder
# ----------------------------------------------------------------


class SystemStateBuilder:
    """
    Mutable accumulator for a SystemState.

    Entities arrive fully validated with their identifiers already
    assigned; into_state() freezes the result.
    """

    def __init__(self, topology: ScionTopology | None = None):
        self.topology = topology or ScionTopology()
        self.access_points: dict[EntityId, AccessPoint] = {}
        self.endhost_apis: dict[EntityId, EndhostApi] = {}
        self.routers: dict[EntityId, Router] = {}
        self._ids: set[EntityId] = set()

    # ----------------------------------------------------------------
    # Registration
    # ----------------------------------------------------------------

    def _claim(self, *entity_ids: EntityId) -> None:
        taken = [i for i in entity_ids if i in self._ids]
        if taken or len(set(entity_ids)) != len(entity_ids):
            raise ValueError(f"entity identifier(s) already in use: {taken}")
        self._ids.update(entity_ids)

    def add_snap(self, access_point: AccessPoint) -> None:
        self._claim(access_point.id, *(dp.id for dp in access_point.data_planes))
        self.access_points[access_point.id] = access_point

    def add_endhost_api(self, api: EndhostApi) -> None:
        self._claim(api.id)
        self.endhost_apis[api.id] = api

    def add_router(self, router: Router) -> None:
        self._claim(router.id)
        self.routers[router.id] = router

    @property
    def entity_count(self) -> int:
        return len(self._ids)

    # ----------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------

    def into_state(self, created_at: datetime | None = None) -> SystemState:
        return SystemState(
            topology=self.topology,
            access_points=MappingProxyType(dict(self.access_points)),
            endhost_apis=MappingProxyType(dict(self.endhost_apis)),
            routers=MappingProxyType(dict(self.routers)),
            created_at=created_at or datetime.now(),
        )
