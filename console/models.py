from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, Field

# ============================================================================
# ORCHESTRATOR-SIDE MODELS
# ============================================================================

class ZoneSpec(BaseModel):
    """Topology unit of a tenant: servers x volumes-per-server x volume size.

    Values are deliberately unconstrained here; the topology validator is the
    single place that decides whether a zone may be submitted.
    """
    name: str
    servers: int = 0
    volumes_per_server: int = 0
    volume_bytes: Optional[int] = None
    storage_class: Optional[str] = None


class TenantResource(BaseModel):
    """A tenant as held by the orchestrator's resource store."""
    name: str
    namespace: str
    creation_timestamp: Optional[str] = None
    current_state: Optional[str] = None
    image: str = ""
    console_image: Optional[str] = None
    image_pull_secret: Optional[str] = None
    zones: list[ZoneSpec] = Field(default_factory=list)
    resource_version: Optional[str] = None
    # Raw zone entries as stored, so patches keep fields the console does not model
    zone_manifests: list[dict[str, Any]] = Field(default_factory=list, exclude=True, repr=False)


class UsageInfo(BaseModel):
    disks_usage: int = 0


# ============================================================================
# REQUEST MODELS
# ============================================================================

class UpdateTenantRequest(BaseModel):
    """Empty image means "resolve latest"; other empty fields mean "unchanged"."""
    image: str = ""
    console_image: str = ""
    image_pull_secret: str = ""


# ============================================================================
# OUTPUT MODELS
# ============================================================================

class VolumeConfiguration(BaseModel):
    size: Optional[int] = None
    storage_class_name: Optional[str] = None


class ZoneSummary(BaseModel):
    name: str
    servers: int
    volumes_per_server: int
    volume_configuration: VolumeConfiguration


class TenantSummary(BaseModel):
    name: str
    namespace: str
    creation_date: Optional[str] = None
    current_state: Optional[str] = None
    image: str = ""
    console_image: Optional[str] = None
    total_size: int = 0
    used_size: int = 0
    instance_count: int = 0
    volume_count: int = 0
    zones: list[ZoneSummary] = Field(default_factory=list)


# ============================================================================
# ADMIN CONNECTION
# ============================================================================

@dataclass(frozen=True)
class Credential:
    access_key: str
    secret_key: str

    def __repr__(self) -> str:
        return f"Credential(access_key={self.access_key!r}, secret_key='***')"


@dataclass(frozen=True)
class Endpoint:
    scheme: str
    host: str
    port: int

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}"


@dataclass(frozen=True)
class ServiceRecord:
    """Network identity of a tenant's internal service."""
    name: str
    cluster_address: str
    port: Optional[int] = None
