"""
Async listener host for a composed testnet model.

Owns:
- one listener per binding in the overlay
- the management listener

SNAP control planes, endhost APIs and the management API are TCP
listeners that answer every connection with one JSON line and close.
SNAP data planes and routers are UDP endpoints that count and drop
datagrams; no SCION forwarding happens here.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

from scionsim.errors import RuntimeStartError
from scionsim.network.addressing import SocketAddr
from scionsim.state.io_config import Binding, BindingRole, IoConfigState
from scionsim.state.system_state import EntityId, SystemState

logger = logging.getLogger(__name__)

UDP_ROLES = (BindingRole.SNAP_DATA_PLANE, BindingRole.ROUTER)


@dataclass(frozen=True)
class RuntimeSpec:
    """Everything the runtime needs to start."""

    system_state: SystemState
    io_config: IoConfigState
    management_listen_addr: SocketAddr


# ======================================================================


class _TcpListener:
    def __init__(
        self,
        *,
        name: str,
        addr: SocketAddr,
        payload_factory: Callable[[], Any],
    ):
        self.name = name
        self.addr = addr
        self.payload_factory = payload_factory

        self.server: asyncio.AbstractServer | None = None

    # ------------------------------------------------------------------

    async def start(self):
        self.server = await asyncio.start_server(
            self._handle,
            host=self.addr.host,
            port=self.addr.port,
        )

    async def stop(self):
        if self.server:
            self.server.close()
            await self.server.wait_closed()
            self.server = None

    @property
    def bound_addr(self) -> tuple[str, int] | None:
        if not self.server or not self.server.sockets:
            return None
        return self.server.sockets[0].getsockname()[:2]

    # ------------------------------------------------------------------

    async def _handle(
        self,
        _reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ):
        try:
            payload = json.dumps(self.payload_factory(), sort_keys=True)
            writer.write(payload.encode() + b"\n")
            await writer.drain()
        except ConnectionError as e:
            logger.debug("%s: peer dropped the connection: %s", self.name, e)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError as e:
                logger.debug("%s: connection reset while closing: %s", self.name, e)


class _DatagramSink(asyncio.DatagramProtocol):
    def __init__(self):
        self.received = 0

    def datagram_received(self, data: bytes, addr) -> None:
        self.received += 1


class _UdpListener:
    def __init__(self, *, name: str, addr: SocketAddr):
        self.name = name
        self.addr = addr

        self.transport: asyncio.DatagramTransport | None = None
        self.protocol: _DatagramSink | None = None

    # ------------------------------------------------------------------

    async def start(self):
        loop = asyncio.get_running_loop()
        self.transport, self.protocol = await loop.create_datagram_endpoint(
            _DatagramSink,
            local_addr=(self.addr.host, self.addr.port),
        )

    async def stop(self):
        if self.transport:
            self.transport.close()
            self.transport = None

    @property
    def bound_addr(self) -> tuple[str, int] | None:
        if not self.transport:
            return None
        return self.transport.get_extra_info("sockname")[:2]

    @property
    def received(self) -> int:
        return self.protocol.received if self.protocol else 0


# ======================================================================


class ScionSimRuntime:
    """Hosts the listeners of a composed model until stopped."""

    def __init__(self, spec: RuntimeSpec):
        self.spec = spec
        self.running = False

        self.listeners: dict[EntityId, _TcpListener | _UdpListener] = {}
        for binding in spec.io_config.bindings():
            self.listeners[binding.entity_id] = self._make_listener(binding)

        self.management = _TcpListener(
            name="management",
            addr=spec.management_listen_addr,
            payload_factory=self.status,
        )

    def _make_listener(self, binding: Binding) -> _TcpListener | _UdpListener:
        name = f"{binding.role.value} {binding.entity_id}"
        if binding.role in UDP_ROLES:
            return _UdpListener(name=name, addr=binding.addr)

        state = self.spec.system_state
        return _TcpListener(
            name=name,
            addr=binding.addr,
            payload_factory=lambda: state.describe(binding.entity_id),
        )

    # ------------------------------------------------------------------

    async def start(self):
        started = []
        for listener in [*self.listeners.values(), self.management]:
            try:
                await listener.start()
            except OSError as e:
                await asyncio.gather(*(s.stop() for s in started))
                raise RuntimeStartError(
                    f"cannot start {listener.name} listener on {listener.addr}: {e}"
                ) from e
            started.append(listener)
            logger.debug("Listening for %s on %s", listener.name, listener.bound_addr)

        self.running = True
        logger.info(
            "Runtime started with %d binding(s), management API on %s",
            len(self.listeners),
            self.management.bound_addr,
        )

    async def stop(self):
        await asyncio.gather(
            *(listener.stop() for listener in [*self.listeners.values(), self.management])
        )
        self.running = False

    # ------------------------------------------------------------------

    @property
    def bound_addresses(self) -> dict[EntityId, tuple[str, int]]:
        return {
            entity_id: listener.bound_addr
            for entity_id, listener in self.listeners.items()
            if listener.bound_addr is not None
        }

    @property
    def management_addr(self) -> tuple[str, int] | None:
        return self.management.bound_addr

    def status(self) -> dict[str, Any]:
        """Management API payload."""
        return {
            "running": self.running,
            "state": self.spec.system_state.summary(),
            "topology": self.spec.system_state.topology.to_dict(),
            "bindings": [
                {
                    "id": binding.entity_id,
                    "role": binding.role.value,
                    "addr": str(binding.addr),
                }
                for binding in self.spec.io_config.bindings()
            ],
        }
