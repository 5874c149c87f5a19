"""
Binding overlay: where each simulated entity listens.

Kept apart from SystemState so that address assignment never leaks into
the logical model. Entries are keyed by the identifiers the assembler
generated.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from scionsim.network.addressing import SocketAddr
from scionsim.state.system_state import EntityId


class BindingRole(Enum):
    SNAP_CONTROL = "snap_control"
    SNAP_DATA_PLANE = "snap_data_plane"
    ENDHOST_API = "endhost_api"
    ROUTER = "router"


@dataclass(frozen=True)
class Binding:
    entity_id: EntityId
    role: BindingRole
    addr: SocketAddr


@dataclass(frozen=True)
class IoConfigState:
    """Frozen binding overlay."""

    snap_control_addrs: Mapping[EntityId, SocketAddr]
    snap_data_plane_addrs: Mapping[EntityId, SocketAddr]
    endhost_api_addrs: Mapping[EntityId, SocketAddr]
    router_addrs: Mapping[EntityId, SocketAddr]

    def bindings(self) -> list[Binding]:
        """Every binding, ordered by entity identifier."""
        result = []
        for role, addrs in (
            (BindingRole.SNAP_CONTROL, self.snap_control_addrs),
            (BindingRole.SNAP_DATA_PLANE, self.snap_data_plane_addrs),
            (BindingRole.ENDHOST_API, self.endhost_api_addrs),
            (BindingRole.ROUTER, self.router_addrs),
        ):
            result.extend(Binding(i, role, addr) for i, addr in addrs.items())
        return sorted(result, key=lambda b: b.entity_id)

    def addr_of(self, entity_id: EntityId) -> SocketAddr | None:
        for binding in self.bindings():
            if binding.entity_id == entity_id:
                return binding.addr
        return None

    def __len__(self) -> int:
        return (
            len(self.snap_control_addrs)
            + len(self.snap_data_plane_addrs)
            + len(self.endhost_api_addrs)
            + len(self.router_addrs)
        )


class IoConfig:
    """Mutable binding overlay filled in alongside the SystemStateBuilder."""

    def __init__(self):
        self.snap_control_addrs: dict[EntityId, SocketAddr] = {}
        self.snap_data_plane_addrs: dict[EntityId, SocketAddr] = {}
        self.endhost_api_addrs: dict[EntityId, SocketAddr] = {}
        self.router_addrs: dict[EntityId, SocketAddr] = {}

    def set_snap_control_addr(self, snap_id: EntityId, addr: SocketAddr) -> None:
        self.snap_control_addrs[snap_id] = addr

    def set_snap_data_plane_addr(self, data_plane_id: EntityId, addr: SocketAddr) -> None:
        self.snap_data_plane_addrs[data_plane_id] = addr

    def set_endhost_api_addr(self, api_id: EntityId, addr: SocketAddr) -> None:
        self.endhost_api_addrs[api_id] = addr

    def set_router_addr(self, router_id: EntityId, addr: SocketAddr) -> None:
        self.router_addrs[router_id] = addr

    def into_state(self) -> IoConfigState:
        return IoConfigState(
            snap_control_addrs=MappingProxyType(dict(self.snap_control_addrs)),
            snap_data_plane_addrs=MappingProxyType(dict(self.snap_data_plane_addrs)),
            endhost_api_addrs=MappingProxyType(dict(self.endhost_api_addrs)),
            router_addrs=MappingProxyType(dict(self.router_addrs)),
        )
