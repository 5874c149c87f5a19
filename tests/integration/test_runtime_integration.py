# tests/integration/test_runtime_integration.py
"""
Runtime start/stop against real sockets on the loopback interface.
"""

import asyncio
import json

import pytest

from scionsim.config.schema import ScionSimConfig
from scionsim.errors import RuntimeStartError
from scionsim.runtime import ScionSimRuntime, compile_config, start_runtime
from scionsim.state.io_config import BindingRole


def loopback_document(document, management_port=0):
    """Rebind every listener of a document to an ephemeral loopback port."""
    for snap in document.get("snaps", []):
        snap["listening_addr"] = "127.0.0.1:0"
        for data_plane in snap["data_planes"]:
            data_plane["listening_addr"] = "127.0.0.1:0"
    for api in document.get("endhost_apis", []):
        api["listening_addr"] = "127.0.0.1:0"
    for router in document.get("routers", []):
        if "listening_addr" in router:
            router["listening_addr"] = "127.0.0.1:0"
    document["management_listen_addr"] = f"127.0.0.1:{management_port}"
    return document


async def read_line(host, port):
    reader, writer = await asyncio.open_connection(host, port)
    try:
        return json.loads(await reader.readline())
    finally:
        writer.close()
        await writer.wait_closed()


@pytest.fixture
async def runtime(full_document):
    spec = compile_config(ScionSimConfig.from_dict(loopback_document(full_document)))
    runtime = await start_runtime(spec)
    yield runtime
    await runtime.stop()


@pytest.mark.asyncio
async def test_runtime_binds_every_entity(runtime):
    assert runtime.running is True
    assert set(runtime.bound_addresses) == {
        b.entity_id for b in runtime.spec.io_config.bindings()
    }
    assert all(port != 0 for _, port in runtime.bound_addresses.values())


@pytest.mark.asyncio
async def test_control_plane_describes_its_snap(runtime):
    snap_id = next(iter(runtime.spec.system_state.access_points))
    host, port = runtime.bound_addresses[snap_id]

    payload = await read_line(host, port)

    assert payload["kind"] == "snap"
    assert payload["id"] == snap_id
    assert [dp["isd_as"] for dp in payload["data_planes"]] == ["1-12", "1-11"]


@pytest.mark.asyncio
async def test_endhost_api_describes_its_isds(runtime):
    api_id = next(iter(runtime.spec.system_state.endhost_apis))

    payload = await read_line(*runtime.bound_addresses[api_id])

    assert payload == {"kind": "endhost_api", "id": api_id, "isds": [1]}


@pytest.mark.asyncio
async def test_management_api_reports_status(runtime):
    payload = await read_line(*runtime.management_addr)

    assert payload["running"] is True
    assert payload["state"]["entities"]["routers"] == 2
    assert len(payload["topology"]["ases"]) == 2
    assert len(payload["bindings"]) == len(runtime.spec.io_config)


@pytest.mark.asyncio
async def test_data_plane_accepts_datagrams(runtime):
    binding = next(
        b
        for b in runtime.spec.io_config.bindings()
        if b.role is BindingRole.SNAP_DATA_PLANE
    )
    listener = runtime.listeners[binding.entity_id]

    loop = asyncio.get_running_loop()
    transport, _ = await loop.create_datagram_endpoint(
        asyncio.DatagramProtocol,
        remote_addr=runtime.bound_addresses[binding.entity_id],
    )
    try:
        transport.sendto(b"scion")
        for _ in range(50):
            if listener.received:
                break
            await asyncio.sleep(0.01)
    finally:
        transport.close()

    assert listener.received == 1


class ResetWriter:
    """Stream writer whose peer has already reset the connection."""

    def __init__(self):
        self.closed = False

    def write(self, data):
        pass

    async def drain(self):
        raise ConnectionResetError("connection reset by peer")

    def close(self):
        self.closed = True

    async def wait_closed(self):
        raise ConnectionResetError("connection reset by peer")


@pytest.mark.asyncio
async def test_peer_reset_does_not_escape_handler(runtime):
    writer = ResetWriter()

    await runtime.management._handle(None, writer)

    assert writer.closed is True


@pytest.mark.asyncio
async def test_stop_releases_listeners(full_document):
    spec = compile_config(ScionSimConfig.from_dict(loopback_document(full_document)))
    runtime = await start_runtime(spec)

    await runtime.stop()

    assert runtime.running is False
    assert runtime.bound_addresses == {}
    assert runtime.management_addr is None


@pytest.mark.asyncio
async def test_address_in_use_fails_start(full_document, unused_tcp_port):
    blocker = await asyncio.start_server(
        lambda _r, w: w.close(), host="127.0.0.1", port=unused_tcp_port
    )
    try:
        spec = compile_config(
            ScionSimConfig.from_dict(
                loopback_document(full_document, management_port=unused_tcp_port)
            )
        )
        runtime = ScionSimRuntime(spec)

        with pytest.raises(RuntimeStartError) as exc_info:
            await runtime.start()

        assert "management" in str(exc_info.value)
        assert runtime.running is False
        # Listeners bound before the failure were released again
        assert runtime.bound_addresses == {}
    finally:
        blocker.close()
        await blocker.wait_closed()
