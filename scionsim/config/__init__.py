"""Configuration document schema and loading."""

from scionsim.config.config_loader import ConfigLoader, load_document
from scionsim.config.schema import (
    AsConfig,
    DataPlaneConfig,
    EndhostApiConfig,
    NextHopAddressingConfig,
    RouterConfig,
    ScionSimConfig,
    SnapConfig,
    SnapInterfaceAddressingConfig,
    TopologyConfig,
)

__all__ = [
    "AsConfig",
    "ConfigLoader",
    "DataPlaneConfig",
    "EndhostApiConfig",
    "NextHopAddressingConfig",
    "RouterConfig",
    "ScionSimConfig",
    "SnapConfig",
    "SnapInterfaceAddressingConfig",
    "TopologyConfig",
    "load_document",
]
