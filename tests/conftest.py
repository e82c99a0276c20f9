"""
Shared fixtures: in-memory orchestrator doubles and a tenant context.
"""
from __future__ import annotations

import os
import sys
from typing import Any, Dict, List, Optional

import pytest
import requests

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from console.context import TenantContext
from console.errors import LookupErrorKind, StoreConflictError, TenantLookupError
from console.models import ServiceRecord, TenantResource, UsageInfo, ZoneSpec
from console.orchestrator import zone_from_manifest
from console.services.image_lookup import LatestImageLookup


class FakeStore:
    """Tenant store double; records every call and honours resource versions."""

    def __init__(self, tenants: Optional[List[TenantResource]] = None):
        self.tenants: Dict[tuple, TenantResource] = {}
        self.calls: List[tuple] = []
        self.patches: List[Dict[str, Any]] = []
        self.get_error: Optional[Exception] = None
        self.patch_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None
        self.conflicts_before_success = 0
        for tenant in tenants or []:
            self.tenants[(tenant.namespace, tenant.name)] = tenant

    def get(self, namespace, name, timeout=None):
        self.calls.append(("get", namespace, name))
        if self.get_error:
            raise self.get_error
        key = (namespace, name)
        if key not in self.tenants:
            raise TenantLookupError(LookupErrorKind.RESOURCE_NOT_FOUND, f"Tenant '{name}' not found")
        return self.tenants[key].model_copy(deep=True)

    def patch(self, namespace, name, document, resource_version=None, timeout=None):
        self.calls.append(("patch", namespace, name))
        self.patches.append(document)
        if self.patch_error:
            raise self.patch_error
        if self.conflicts_before_success > 0:
            self.conflicts_before_success -= 1
            raise StoreConflictError("the object has been modified")
        current = self.tenants[(namespace, name)]
        if resource_version is not None and resource_version != current.resource_version:
            raise StoreConflictError("the object has been modified")

        spec = document.get("spec", {})
        changes: Dict[str, Any] = {"resource_version": str(int(current.resource_version or "0") + 1)}
        if "image" in spec:
            changes["image"] = spec["image"]
        if "console" in spec:
            changes["console_image"] = spec["console"]["image"]
        if "imagePullSecret" in spec:
            changes["image_pull_secret"] = spec["imagePullSecret"]["name"]
        if "zones" in spec:
            changes["zones"] = [zone_from_manifest(z) for z in spec["zones"]]
            changes["zone_manifests"] = list(spec["zones"])
        updated = current.model_copy(update=changes, deep=True)
        self.tenants[(namespace, name)] = updated
        return updated

    def delete(self, namespace, name, timeout=None):
        self.calls.append(("delete", namespace, name))
        if self.delete_error:
            raise self.delete_error
        self.tenants.pop((namespace, name), None)

    def list(self, namespace=None, timeout=None):
        self.calls.append(("list", namespace))
        return [t for (ns, _), t in self.tenants.items() if namespace is None or ns == namespace]


class FakeSecrets:
    def __init__(self, data=None, error: Optional[Exception] = None):
        self.data = data if data is not None else {"accesskey": b"access", "secretkey": b"secret"}
        self.error = error
        self.calls: List[tuple] = []

    def get(self, namespace, secret_name, timeout=None):
        self.calls.append((namespace, secret_name))
        if self.error:
            raise self.error
        return dict(self.data)


class FakeServices:
    def __init__(self, address="10.1.1.2", port=None, error: Optional[Exception] = None):
        self.address = address
        self.port = port
        self.error = error
        self.calls: List[tuple] = []

    def get(self, namespace, service_name, timeout=None):
        self.calls.append((namespace, service_name))
        if self.error:
            raise self.error
        return ServiceRecord(name=service_name, cluster_address=self.address, port=self.port)


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeFetcher:
    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None):
        self.response = response or FakeResponse()
        self.error = error
        self.urls: List[str] = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.response


class FakeUsage:
    def __init__(self, disks_usage=0):
        self.disks_usage = disks_usage

    def usage(self, tenant, timeout=None):
        return UsageInfo(disks_usage=self.disks_usage)


def make_tenant(name="tenant1", namespace="minio-ns", **overrides) -> TenantResource:
    fields = dict(
        name=name,
        namespace=namespace,
        creation_timestamp="2020-06-18T10:00:00Z",
        current_state="ready",
        image="minio/minio:RELEASE.2020-06-14T18-32-17Z",
        zones=[
            ZoneSpec(name="zone1", servers=2, volumes_per_server=4, volume_bytes=1048576, storage_class="standard")
        ],
        resource_version="1",
    )
    fields.update(overrides)
    return TenantResource(**fields)


@pytest.fixture
def store():
    return FakeStore([make_tenant()])


@pytest.fixture
def fetcher():
    return FakeFetcher(error=requests.ConnectionError("offline"))


@pytest.fixture
def ctx(store, fetcher):
    return TenantContext(
        store=store,
        secrets=FakeSecrets(),
        services=FakeServices(),
        image_lookup=LatestImageLookup(fetcher=fetcher, url="https://releases.example/"),
        usage_provider=FakeUsage(1024),
        timeout_seconds=None,
        conflict_retries=3,
    )
