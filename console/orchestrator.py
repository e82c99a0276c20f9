"""
Orchestrator collaborators: tenant resource store, secret registry and
service registry.

The protocols below are the only surface the console core depends on. The
Kube* classes implement them over the Kubernetes REST API with `requests`;
tests substitute in-memory doubles.

Usage:
    kube = KubeClient("https://kubernetes.default.svc", token="...")
    store = KubeTenantStore(kube)
    tenant = store.get("minio-ns", "tenant1", timeout=10)
"""

import base64
import logging
from typing import Any, Dict, List, Optional, Protocol

import requests

from console.config import TENANT_API_GROUP, TENANT_API_VERSION
from console.errors import (
    LookupErrorKind,
    StoreConflictError,
    StoreWriteError,
    TenantLookupError,
)
from console.models import ServiceRecord, TenantResource, ZoneSpec
from console.services.topology import format_quantity, parse_quantity

logger = logging.getLogger(__name__)

MERGE_PATCH_CONTENT_TYPE = "application/merge-patch+json"


# ============================================================================
# COLLABORATOR PROTOCOLS
# ============================================================================

class TenantStore(Protocol):
    def get(self, namespace: str, name: str, timeout: Optional[float] = None) -> TenantResource:
        ...

    def patch(
        self,
        namespace: str,
        name: str,
        document: Dict[str, Any],
        resource_version: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> TenantResource:
        ...

    def delete(self, namespace: str, name: str, timeout: Optional[float] = None) -> None:
        ...

    def list(self, namespace: Optional[str] = None, timeout: Optional[float] = None) -> List[TenantResource]:
        ...


class SecretRegistry(Protocol):
    def get(self, namespace: str, secret_name: str, timeout: Optional[float] = None) -> Dict[str, bytes]:
        ...


class ServiceRegistry(Protocol):
    def get(self, namespace: str, service_name: str, timeout: Optional[float] = None) -> ServiceRecord:
        ...


# ============================================================================
# MANIFEST CONVERSION
# ============================================================================

def zone_from_manifest(doc: Dict[str, Any]) -> ZoneSpec:
    claim_spec = ((doc.get("volumeClaimTemplate") or {}).get("spec") or {})
    storage = ((claim_spec.get("resources") or {}).get("requests") or {}).get("storage")
    volume_bytes = None
    if storage is not None:
        try:
            volume_bytes = parse_quantity(storage)
        except ValueError as e:
            logger.warning(f"Zone '{doc.get('name', '')}': unreadable storage request, size unknown: {e}")
    return ZoneSpec(
        name=doc.get("name", ""),
        servers=int(doc.get("servers", 0) or 0),
        volumes_per_server=int(doc.get("volumesPerServer", 0) or 0),
        volume_bytes=volume_bytes,
        storage_class=claim_spec.get("storageClassName"),
    )


def zone_to_manifest(zone: ZoneSpec) -> Dict[str, Any]:
    claim_spec: Dict[str, Any] = {
        "accessModes": ["ReadWriteOnce"],
        "resources": {"requests": {"storage": format_quantity(zone.volume_bytes or 0)}},
    }
    if zone.storage_class:
        claim_spec["storageClassName"] = zone.storage_class
    return {
        "name": zone.name,
        "servers": zone.servers,
        "volumesPerServer": zone.volumes_per_server,
        "volumeClaimTemplate": {"metadata": {"name": "data"}, "spec": claim_spec},
    }


def tenant_from_manifest(doc: Dict[str, Any]) -> TenantResource:
    metadata = doc.get("metadata") or {}
    spec = doc.get("spec") or {}
    status = doc.get("status") or {}
    return TenantResource(
        name=metadata.get("name", ""),
        namespace=metadata.get("namespace", ""),
        creation_timestamp=metadata.get("creationTimestamp"),
        current_state=status.get("currentState"),
        image=spec.get("image", "") or "",
        console_image=(spec.get("console") or {}).get("image"),
        image_pull_secret=(spec.get("imagePullSecret") or {}).get("name"),
        zones=[zone_from_manifest(z) for z in (spec.get("zones") or [])],
        resource_version=metadata.get("resourceVersion"),
        zone_manifests=list(spec.get("zones") or []),
    )


# ============================================================================
# KUBERNETES REST CLIENT
# ============================================================================

class KubeClient:
    """Thin authenticated session against the Kubernetes API server."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        verify: Any = True,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.verify = verify
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def request(self, method: str, path: str, timeout: Optional[float] = None, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")
        return self.session.request(method, url, timeout=timeout, **kwargs)


def _error_detail(response: requests.Response) -> str:
    try:
        return str(response.json().get("message") or response.text)
    except ValueError:
        return response.text


class KubeTenantStore:
    """Tenant custom resources (`tenants.<group>`)."""

    def __init__(self, client: KubeClient, group: str = TENANT_API_GROUP, version: str = TENANT_API_VERSION):
        self.client = client
        self.prefix = f"/apis/{group}/{version}"

    def _path(self, namespace: str, name: Optional[str] = None) -> str:
        path = f"{self.prefix}/namespaces/{namespace}/tenants"
        return f"{path}/{name}" if name else path

    def get(self, namespace: str, name: str, timeout: Optional[float] = None) -> TenantResource:
        try:
            response = self.client.request("GET", self._path(namespace, name), timeout=timeout)
        except requests.RequestException as e:
            logger.error(f"Tenant fetch {namespace}/{name} failed: {e}")
            raise TenantLookupError(LookupErrorKind.STORE_UNAVAILABLE, f"Tenant store unavailable: {e}") from e

        if response.status_code == 404:
            raise TenantLookupError(
                LookupErrorKind.RESOURCE_NOT_FOUND, f"Tenant '{name}' not found in namespace '{namespace}'"
            )
        if response.status_code != 200:
            raise TenantLookupError(
                LookupErrorKind.STORE_UNAVAILABLE,
                f"Tenant fetch failed: HTTP {response.status_code} {_error_detail(response)}",
            )
        return tenant_from_manifest(response.json())

    def patch(
        self,
        namespace: str,
        name: str,
        document: Dict[str, Any],
        resource_version: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> TenantResource:
        body = dict(document)
        if resource_version is not None:
            # The API server rejects the merge with 409 when the version moved on
            metadata = dict(body.get("metadata") or {})
            metadata["resourceVersion"] = resource_version
            body["metadata"] = metadata

        try:
            response = self.client.request(
                "PATCH",
                self._path(namespace, name),
                timeout=timeout,
                json=body,
                headers={"Content-Type": MERGE_PATCH_CONTENT_TYPE},
            )
        except requests.RequestException as e:
            logger.error(f"Tenant patch {namespace}/{name} failed: {e}")
            raise StoreWriteError(f"Tenant store unavailable: {e}") from e

        if response.status_code == 409:
            raise StoreConflictError(f"Tenant '{name}' was modified concurrently: {_error_detail(response)}")
        if response.status_code == 404:
            raise TenantLookupError(
                LookupErrorKind.RESOURCE_NOT_FOUND, f"Tenant '{name}' not found in namespace '{namespace}'"
            )
        if response.status_code not in (200, 201):
            raise StoreWriteError(f"Tenant patch failed: HTTP {response.status_code} {_error_detail(response)}")
        return tenant_from_manifest(response.json())

    def delete(self, namespace: str, name: str, timeout: Optional[float] = None) -> None:
        try:
            response = self.client.request("DELETE", self._path(namespace, name), timeout=timeout)
        except requests.RequestException as e:
            logger.error(f"Tenant delete {namespace}/{name} failed: {e}")
            raise StoreWriteError(f"Tenant store unavailable: {e}") from e

        if response.status_code == 404:
            raise TenantLookupError(
                LookupErrorKind.RESOURCE_NOT_FOUND, f"Tenant '{name}' not found in namespace '{namespace}'"
            )
        if response.status_code not in (200, 202):
            raise StoreWriteError(f"Tenant delete failed: HTTP {response.status_code} {_error_detail(response)}")

    def list(self, namespace: Optional[str] = None, timeout: Optional[float] = None) -> List[TenantResource]:
        path = self._path(namespace) if namespace else f"{self.prefix}/tenants"
        try:
            response = self.client.request("GET", path, timeout=timeout)
        except requests.RequestException as e:
            logger.error(f"Tenant list failed: {e}")
            raise TenantLookupError(LookupErrorKind.STORE_UNAVAILABLE, f"Tenant store unavailable: {e}") from e

        if response.status_code != 200:
            raise TenantLookupError(
                LookupErrorKind.STORE_UNAVAILABLE,
                f"Tenant list failed: HTTP {response.status_code} {_error_detail(response)}",
            )
        return [tenant_from_manifest(item) for item in response.json().get("items", [])]


class KubeSecretRegistry:
    def __init__(self, client: KubeClient):
        self.client = client

    def get(self, namespace: str, secret_name: str, timeout: Optional[float] = None) -> Dict[str, bytes]:
        response = self.client.request("GET", f"/api/v1/namespaces/{namespace}/secrets/{secret_name}", timeout=timeout)
        response.raise_for_status()
        data = response.json().get("data") or {}
        return {key: base64.b64decode(value) for key, value in data.items()}


class KubeServiceRegistry:
    def __init__(self, client: KubeClient):
        self.client = client

    def get(self, namespace: str, service_name: str, timeout: Optional[float] = None) -> ServiceRecord:
        response = self.client.request(
            "GET", f"/api/v1/namespaces/{namespace}/services/{service_name}", timeout=timeout
        )
        response.raise_for_status()
        spec = response.json().get("spec") or {}
        cluster_ip = spec.get("clusterIP")
        if not cluster_ip or cluster_ip == "None":
            raise ValueError(f"Service '{service_name}' has no cluster address")
        ports = spec.get("ports") or []
        port = int(ports[0]["port"]) if ports and ports[0].get("port") else None
        return ServiceRecord(name=service_name, cluster_address=cluster_ip, port=port)
