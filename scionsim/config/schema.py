"""
Configuration document shape.

Only the structure is checked here (field presence and JSON types);
identifiers and addresses stay as text and are parsed by the assembler.
Missing addresses are kept as None so the assembler can report them as
MissingRequiredAddress.
"""

from typing import Any

from pydantic import (
    BaseModel,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    field_validator,
    model_serializer,
    model_validator,
)

from scionsim.errors import MalformedDocument

NEXT_HOP_KEYS = ("local_addresses", "next_hops")
SNAP_INTERFACE_KEYS = ("snap_data_plane_excludes", "snap_data_plane_interfaces")


def _format_loc(path: str, loc: tuple) -> str | None:
    """Render a pydantic error location as ``routers[1].interfaces[2]``."""
    text = path
    for part in loc:
        if isinstance(part, int):
            text += f"[{part}]"
        else:
            text = f"{text}.{part}" if text else str(part)
    return text or None


class DocumentModel(BaseModel):
    """Base for every document section; maps validation errors to paths."""

    @classmethod
    def from_dict(cls, data: Any, path: str = ""):
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            error = e.errors()[0]
            raise MalformedDocument(
                error["msg"], field=_format_loc(path, error["loc"])
            ) from None

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)


# ----------------------------------------------------------------
# Topology
# ----------------------------------------------------------------


class AsConfig(DocumentModel):
    isd_as: StrictStr
    is_core: StrictBool


class TopologyConfig(DocumentModel):
    ases: list[AsConfig]
    links: list[StrictStr]


# ----------------------------------------------------------------
# SNAPs (SCION network access points)
# ----------------------------------------------------------------


class DataPlaneConfig(DocumentModel):
    isd_as: StrictStr
    address_range: list[StrictStr]
    listening_addr: StrictStr | None = None


class SnapConfig(DocumentModel):
    """
    A SNAP declares its data planes either as a single ``data_plane``
    object or as a ``data_planes`` list. After validation
    ``data_planes`` always holds the complete list.
    """

    listening_addr: StrictStr | None = None
    data_plane: DataPlaneConfig | None = None
    data_planes: list[DataPlaneConfig] | None = None

    @model_validator(mode="after")
    def check_data_plane_form(self) -> "SnapConfig":
        if self.data_plane is not None and self.data_planes is not None:
            raise ValueError("use either 'data_plane' or 'data_planes', not both")
        if self.data_plane is not None:
            self.data_planes = [self.data_plane]
        if not self.data_planes:
            raise ValueError("SNAP declares no data plane")
        return self

    @property
    def single_data_plane(self) -> bool:
        return self.data_plane is not None

    @model_serializer(mode="wrap")
    def serialize_one_form(self, handler) -> dict:
        data = handler(self)
        data.pop("data_planes" if self.single_data_plane else "data_plane", None)
        return data


# ----------------------------------------------------------------
# Endhost APIs
# ----------------------------------------------------------------


class EndhostApiConfig(DocumentModel):
    isds: list[StrictStr]
    listening_addr: StrictStr | None = None


# ----------------------------------------------------------------
# Routers
# ----------------------------------------------------------------


class NextHopAddressingConfig(BaseModel):
    """Explicit local addresses plus a next hop per interface."""

    local_addresses: list[str] = Field(default_factory=list)
    next_hops: dict[str, str] = Field(default_factory=dict)


class SnapInterfaceAddressingConfig(BaseModel):
    """Excluded SNAP data plane ranges plus a SNAP address per interface."""

    snap_data_plane_excludes: list[str] = Field(default_factory=list)
    snap_data_plane_interfaces: dict[str, str] = Field(default_factory=dict)


RouterAddressingConfig = NextHopAddressingConfig | SnapInterfaceAddressingConfig


class RouterConfig(DocumentModel):
    """
    Router entry. The addressing fields of the two variants sit flat on
    the router object and may not be mixed; a router with neither gets
    an empty next-hop addressing.
    """

    isd_as: StrictStr
    interfaces: list[Any]
    listening_addr: StrictStr | None = None

    local_addresses: list[StrictStr] | None = None
    next_hops: dict[str, StrictStr] | None = None
    snap_data_plane_excludes: list[StrictStr] | None = None
    snap_data_plane_interfaces: dict[str, StrictStr] | None = None

    @field_validator("next_hops", "snap_data_plane_interfaces", mode="before")
    @classmethod
    def stringify_interface_keys(cls, value: Any) -> Any:
        # YAML reads unquoted interface keys as integers
        if isinstance(value, dict):
            return {str(k): v for k, v in value.items()}
        return value

    @model_validator(mode="after")
    def check_addressing_variant(self) -> "RouterConfig":
        next_hop = [k for k in NEXT_HOP_KEYS if getattr(self, k) is not None]
        snap_interface = [
            k for k in SNAP_INTERFACE_KEYS if getattr(self, k) is not None
        ]
        if next_hop and snap_interface:
            raise ValueError(
                f"router mixes addressing fields {next_hop} and {snap_interface}"
            )
        return self

    @property
    def addressing(self) -> RouterAddressingConfig:
        if (
            self.snap_data_plane_excludes is not None
            or self.snap_data_plane_interfaces is not None
        ):
            return SnapInterfaceAddressingConfig(
                snap_data_plane_excludes=self.snap_data_plane_excludes or [],
                snap_data_plane_interfaces=self.snap_data_plane_interfaces or {},
            )
        return NextHopAddressingConfig(
            local_addresses=self.local_addresses or [],
            next_hops=self.next_hops or {},
        )


# ----------------------------------------------------------------
# Document root
# ----------------------------------------------------------------


class ScionSimConfig(DocumentModel):
    """Parsed configuration document."""

    topology: TopologyConfig
    management_listen_addr: StrictStr | None = None
    snaps: list[SnapConfig] | None = None
    endhost_apis: list[EndhostApiConfig] | None = None
    routers: list[RouterConfig] | None = None
