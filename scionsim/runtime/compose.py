"""
Composition of the assembled model into the runtime start contract.
"""

import logging

from scionsim.config.schema import ScionSimConfig
from scionsim.network.addressing import SocketAddr
from scionsim.runtime.runtime import RuntimeSpec, ScionSimRuntime
from scionsim.state.assembler import EntityAssembler
from scionsim.state.io_config import IoConfigState
from scionsim.state.system_state import SystemState

logger = logging.getLogger(__name__)


def compose(
    system_state: SystemState,
    io_config: IoConfigState,
    management_listen_addr: SocketAddr,
) -> RuntimeSpec:
    return RuntimeSpec(
        system_state=system_state,
        io_config=io_config,
        management_listen_addr=management_listen_addr,
    )


def compile_config(
    config: ScionSimConfig, assembler: EntityAssembler | None = None
) -> RuntimeSpec:
    """Validate and assemble a parsed document into a RuntimeSpec."""
    assembly = (assembler or EntityAssembler()).assemble(config)
    return compose(
        assembly.system_state,
        assembly.io_config,
        assembly.management_listen_addr,
    )


async def start_runtime(spec: RuntimeSpec) -> ScionSimRuntime:
    """Start the runtime; RuntimeStartError propagates unchanged."""
    logger.info("Starting SCION testnet runtime...")
    runtime = ScionSimRuntime(spec)
    await runtime.start()
    logger.info("SCION testnet runtime started")
    return runtime
