from typing import Optional

from console.models import (
    TenantResource,
    TenantSummary,
    UsageInfo,
    VolumeConfiguration,
    ZoneSpec,
    ZoneSummary,
)
from console.services.topology import total_bytes


def zone_summary(zone: ZoneSpec) -> ZoneSummary:
    return ZoneSummary(
        name=zone.name,
        servers=zone.servers,
        volumes_per_server=zone.volumes_per_server,
        volume_configuration=VolumeConfiguration(
            size=zone.volume_bytes,
            storage_class_name=zone.storage_class,
        ),
    )


def to_summary(resource: TenantResource, usage: Optional[UsageInfo] = None) -> TenantSummary:
    """Project a tenant resource plus live usage onto the display model."""
    usage = usage or UsageInfo()
    return TenantSummary(
        name=resource.name,
        namespace=resource.namespace,
        creation_date=resource.creation_timestamp,
        current_state=resource.current_state,
        image=resource.image,
        console_image=resource.console_image,
        total_size=total_bytes(resource.zones),
        used_size=usage.disks_usage,
        instance_count=sum(z.servers for z in resource.zones),
        volume_count=sum(z.servers * z.volumes_per_server for z in resource.zones),
        zones=[zone_summary(z) for z in resource.zones],
    )
