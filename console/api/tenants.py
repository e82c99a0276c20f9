from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from console.context import TenantContext, build_context
from console.errors import TenantError
from console.models import TenantResource, UpdateTenantRequest, ZoneSpec
from console.services.tenant_manager import TenantManager
from console.services.translator import to_summary

router = APIRouter()

_context: Optional[TenantContext] = None


def set_context(ctx: Optional[TenantContext]) -> None:
    global _context
    _context = ctx


def get_manager() -> TenantManager:
    global _context
    if _context is None:
        _context = build_context()
    return TenantManager(_context)


def _http_error(e: TenantError) -> HTTPException:
    detail = {"error": e.message, "category": e.category.value}
    kind = getattr(e, "kind", None)
    if kind is not None:
        detail["kind"] = kind.value
    if e.step is not None:
        detail["step"] = e.step.value
    return HTTPException(status_code=e.status_code, detail=detail)


class VolumeConfigurationRequest(BaseModel):
    size: Optional[int] = None
    storage_class_name: Optional[str] = None


class ZoneRequest(BaseModel):
    name: str
    servers: int = 0
    volumes_per_server: int = 0
    volume_configuration: Optional[VolumeConfigurationRequest] = None

    def to_zone(self) -> ZoneSpec:
        volume = self.volume_configuration or VolumeConfigurationRequest()
        return ZoneSpec(
            name=self.name,
            servers=self.servers,
            volumes_per_server=self.volumes_per_server,
            volume_bytes=volume.size,
            storage_class=volume.storage_class_name,
        )


def _serialize(resource: TenantResource) -> dict:
    return to_summary(resource).model_dump()


@router.get("/tenants")
def list_all_tenants(manager: TenantManager = Depends(get_manager)):
    try:
        tenants = manager.list_tenants()
    except TenantError as e:
        raise _http_error(e)
    return {"tenants": [t.model_dump() for t in tenants], "total": len(tenants)}


@router.get("/namespaces/{namespace}/tenants")
def list_tenants(namespace: str, manager: TenantManager = Depends(get_manager)):
    try:
        tenants = manager.list_tenants(namespace)
    except TenantError as e:
        raise _http_error(e)
    return {"tenants": [t.model_dump() for t in tenants], "total": len(tenants)}


@router.get("/namespaces/{namespace}/tenants/{tenant}")
def tenant_info(namespace: str, tenant: str, manager: TenantManager = Depends(get_manager)):
    try:
        return manager.tenant_info(namespace, tenant).model_dump()
    except TenantError as e:
        raise _http_error(e)


@router.delete("/namespaces/{namespace}/tenants/{tenant}", status_code=204)
def delete_tenant(namespace: str, tenant: str, manager: TenantManager = Depends(get_manager)):
    try:
        manager.delete_tenant(namespace, tenant)
    except TenantError as e:
        raise _http_error(e)


@router.post("/namespaces/{namespace}/tenants/{tenant}/zones", status_code=201)
def add_zone(namespace: str, tenant: str, payload: ZoneRequest, manager: TenantManager = Depends(get_manager)):
    try:
        updated = manager.add_zone(namespace, tenant, payload.to_zone())
    except TenantError as e:
        raise _http_error(e)
    return _serialize(updated)


@router.put("/namespaces/{namespace}/tenants/{tenant}")
def update_tenant(
    namespace: str, tenant: str, payload: UpdateTenantRequest, manager: TenantManager = Depends(get_manager)
):
    try:
        updated = manager.update_tenant(namespace, tenant, payload)
    except TenantError as e:
        raise _http_error(e)
    return _serialize(updated)


@router.get("/namespaces/{namespace}/tenants/{tenant}/health")
def tenant_health(
    namespace: str,
    tenant: str,
    service_name: Optional[str] = None,
    manager: TenantManager = Depends(get_manager),
):
    try:
        return manager.tenant_health(namespace, tenant, service_name=service_name)
    except TenantError as e:
        raise _http_error(e)
