"""
Entity assembler.

Turns a parsed configuration document into a frozen SystemState plus
its binding overlay. Every entity is validated completely before it is
registered, and a document is assembled into fresh builders that are
only frozen once the last entity went through; a failing document
therefore never yields a partial model.
"""

import itertools
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, TypeVar

from scionsim.config.schema import (
    EndhostApiConfig,
    NextHopAddressingConfig,
    RouterConfig,
    ScionSimConfig,
    SnapConfig,
)
from scionsim.errors import (
    ConfigurationError,
    InvalidInterfaceId,
    MissingRequiredAddress,
)
from scionsim.identifiers import IsdAsn, parse_interface_id, parse_isd
from scionsim.network.addressing import SocketAddr, parse_prefix, parse_socket_addr
from scionsim.network.topology import build_topology
from scionsim.state.io_config import IoConfig, IoConfigState
from scionsim.state.system_state import (
    AccessPoint,
    DataPlane,
    EndhostApi,
    EntityId,
    NextHopAddressing,
    Router,
    RouterAddressing,
    SnapInterfaceAddressing,
    SystemState,
    SystemStateBuilder,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _parse(parser: Callable[[str], T], value, field: str) -> T:
    try:
        return parser(value)
    except ConfigurationError as e:
        raise e.at(field) from None


def _require_addr(value: str | None, field: str) -> SocketAddr:
    if value is None:
        raise MissingRequiredAddress("listening address is required", field=field)
    return _parse(parse_socket_addr, value, field)


@dataclass(frozen=True)
class Assembly:
    """Result of assembling one configuration document."""

    system_state: SystemState
    io_config: IoConfigState
    management_listen_addr: SocketAddr


class EntityAssembler:
    """
    Builds simulated endpoints and assigns their identifiers.

    Identifiers come from a counter owned by this assembler. They are
    handed out in declaration order, shared by every entity kind, and
    never reused for the lifetime of the assembler.
    """

    def __init__(self, first_id: EntityId = 1):
        self._counter = itertools.count(first_id)

    def next_id(self) -> EntityId:
        return next(self._counter)

    # ----------------------------------------------------------------
    # SNAPs
    # ----------------------------------------------------------------

    def add_snap(
        self,
        state: SystemStateBuilder,
        io_config: IoConfig,
        config: SnapConfig,
        path: str = "snap",
    ) -> AccessPoint:
        control_addr = _require_addr(config.listening_addr, f"{path}.listening_addr")

        planes = []
        for i, dp_config in enumerate(config.data_planes):
            if config.single_data_plane:
                dp_path = f"{path}.data_plane"
            else:
                dp_path = f"{path}.data_planes[{i}]"

            isd_as = _parse(IsdAsn.parse, dp_config.isd_as, f"{dp_path}.isd_as")
            ranges = tuple(
                _parse(parse_prefix, r, f"{dp_path}.address_range[{j}]")
                for j, r in enumerate(dp_config.address_range)
            )
            addr = _require_addr(dp_config.listening_addr, f"{dp_path}.listening_addr")
            planes.append((isd_as, ranges, addr))

        snap_id = self.next_id()
        data_planes = []
        for isd_as, ranges, _ in planes:
            data_planes.append(
                DataPlane(id=self.next_id(), isd_as=isd_as, address_ranges=ranges)
            )

        access_point = AccessPoint(id=snap_id, data_planes=tuple(data_planes))
        state.add_snap(access_point)

        io_config.set_snap_control_addr(snap_id, control_addr)
        for data_plane, (_, _, addr) in zip(data_planes, planes):
            io_config.set_snap_data_plane_addr(data_plane.id, addr)

        logger.debug(
            "Registered SNAP %d (control %s) with %d data plane(s)",
            snap_id,
            control_addr,
            len(data_planes),
        )
        return access_point

    # ----------------------------------------------------------------
    # Endhost APIs
    # ----------------------------------------------------------------

    def add_endhost_api(
        self,
        state: SystemStateBuilder,
        io_config: IoConfig,
        config: EndhostApiConfig,
        path: str = "endhost_api",
    ) -> EndhostApi:
        isds = tuple(
            _parse(parse_isd, isd, f"{path}.isds[{i}]")
            for i, isd in enumerate(config.isds)
        )
        addr = _require_addr(config.listening_addr, f"{path}.listening_addr")

        api = EndhostApi(id=self.next_id(), isds=isds)
        state.add_endhost_api(api)
        io_config.set_endhost_api_addr(api.id, addr)

        logger.debug("Registered endhost API %d on %s for ISDs %s", api.id, addr, isds)
        return api

    # ----------------------------------------------------------------
    # Routers
    # ----------------------------------------------------------------

    @staticmethod
    def _parse_interfaces(values: list, path: str) -> tuple[int, ...]:
        if not values:
            raise InvalidInterfaceId(
                "router must declare at least one interface", field=path
            )

        interfaces = []
        for i, value in enumerate(values):
            ifid = _parse(parse_interface_id, value, f"{path}[{i}]")
            if ifid in interfaces:
                raise InvalidInterfaceId(
                    f"interface {ifid} declared twice", field=f"{path}[{i}]"
                )
            interfaces.append(ifid)
        return tuple(interfaces)

    @staticmethod
    def _parse_addressing(config: RouterConfig, path: str) -> RouterAddressing:
        # Next hops are not cross-checked against the router's interfaces.
        addressing = config.addressing

        if isinstance(addressing, NextHopAddressingConfig):
            return NextHopAddressing(
                local_addresses=tuple(
                    _parse(parse_prefix, a, f"{path}.local_addresses[{i}]")
                    for i, a in enumerate(addressing.local_addresses)
                ),
                next_hops=MappingProxyType(
                    {
                        key: _parse(parse_socket_addr, addr, f"{path}.next_hops.{key}")
                        for key, addr in addressing.next_hops.items()
                    }
                ),
            )

        return SnapInterfaceAddressing(
            snap_data_plane_excludes=tuple(
                _parse(parse_prefix, a, f"{path}.snap_data_plane_excludes[{i}]")
                for i, a in enumerate(addressing.snap_data_plane_excludes)
            ),
            snap_data_plane_interfaces=MappingProxyType(
                {
                    key: _parse(
                        parse_socket_addr,
                        addr,
                        f"{path}.snap_data_plane_interfaces.{key}",
                    )
                    for key, addr in addressing.snap_data_plane_interfaces.items()
                }
            ),
        )

    def add_router(
        self,
        state: SystemStateBuilder,
        io_config: IoConfig,
        config: RouterConfig,
        path: str = "router",
    ) -> Router:
        isd_as = _parse(IsdAsn.parse, config.isd_as, f"{path}.isd_as")
        interfaces = self._parse_interfaces(config.interfaces, f"{path}.interfaces")
        addressing = self._parse_addressing(config, path)

        if isinstance(addressing, SnapInterfaceAddressing):
            addr = _require_addr(config.listening_addr, f"{path}.listening_addr")
        elif config.listening_addr is not None:
            addr = _parse(parse_socket_addr, config.listening_addr, f"{path}.listening_addr")
        else:
            addr = None

        router = Router(
            id=self.next_id(),
            isd_as=isd_as,
            interfaces=interfaces,
            addressing=addressing,
        )
        state.add_router(router)
        if addr is not None:
            io_config.set_router_addr(router.id, addr)

        logger.debug(
            "Registered router %d in %s with interfaces %s", router.id, isd_as, interfaces
        )
        return router

    # ----------------------------------------------------------------
    # Whole document
    # ----------------------------------------------------------------

    def assemble(self, config: ScionSimConfig) -> Assembly:
        """Assemble a whole document; the first error aborts the load."""
        management_addr = _require_addr(
            config.management_listen_addr, "management_listen_addr"
        )

        state = SystemStateBuilder(build_topology(config.topology))
        io_config = IoConfig()

        for i, snap in enumerate(config.snaps or []):
            self.add_snap(state, io_config, snap, f"snaps[{i}]")

        for i, api in enumerate(config.endhost_apis or []):
            self.add_endhost_api(state, io_config, api, f"endhost_apis[{i}]")

        for i, router in enumerate(config.routers or []):
            self.add_router(state, io_config, router, f"routers[{i}]")

        system_state = state.into_state()
        logger.info(
            "Assembled %d SNAP(s), %d endhost API(s), %d router(s)",
            len(system_state.access_points),
            len(system_state.endhost_apis),
            len(system_state.routers),
        )
        return Assembly(
            system_state=system_state,
            io_config=io_config.into_state(),
            management_listen_addr=management_addr,
        )
