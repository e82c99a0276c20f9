"""
Kubernetes REST collaborators and manifest conversion.
"""
from __future__ import annotations

import base64
import copy

import pytest
import requests

from console.errors import LookupErrorKind, StoreConflictError, StoreWriteError, TenantLookupError
from console.models import ZoneSpec
from console.orchestrator import (
    KubeClient,
    KubeSecretRegistry,
    KubeServiceRegistry,
    KubeTenantStore,
    tenant_from_manifest,
    zone_to_manifest,
)
from console.services.translator import to_summary

TENANT_MANIFEST = {
    "apiVersion": "minio.min.io/v1",
    "kind": "Tenant",
    "metadata": {
        "name": "tenant1",
        "namespace": "minio-ns",
        "creationTimestamp": "2020-06-18T10:00:00Z",
        "resourceVersion": "42",
    },
    "spec": {
        "image": "minio/minio:RELEASE.2020-06-14T18-32-17Z",
        "console": {"image": "minio/console:v0.3.13"},
        "imagePullSecret": {"name": "minio-regcred"},
        "zones": [
            {
                "name": "zone1",
                "servers": 2,
                "volumesPerServer": 4,
                "volumeClaimTemplate": {
                    "spec": {"resources": {"requests": {"storage": "1Mi"}}, "storageClassName": "standard"}
                },
            }
        ],
    },
    "status": {"currentState": "ready"},
}


class StubResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class StubSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []
        self.headers = {}
        self.verify = True

    def request(self, method, url, timeout=None, **kwargs):
        self.requests.append((method, url, timeout, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(*responses):
    session = StubSession(responses)
    return KubeClient("https://k8s.example/", token="tok", verify=False, session=session), session


def test_tenant_from_manifest():
    tenant = tenant_from_manifest(TENANT_MANIFEST)

    assert tenant.name == "tenant1"
    assert tenant.namespace == "minio-ns"
    assert tenant.current_state == "ready"
    assert tenant.console_image == "minio/console:v0.3.13"
    assert tenant.image_pull_secret == "minio-regcred"
    assert tenant.resource_version == "42"
    assert tenant.zones == [
        ZoneSpec(name="zone1", servers=2, volumes_per_server=4, volume_bytes=1048576, storage_class="standard")
    ]
    assert tenant.zone_manifests == TENANT_MANIFEST["spec"]["zones"]


def test_zone_manifest_without_storage_class():
    doc = zone_to_manifest(ZoneSpec(name="z", servers=1, volumes_per_server=1, volume_bytes=10))
    assert "storageClassName" not in doc["volumeClaimTemplate"]["spec"]
    assert doc["volumeClaimTemplate"]["spec"]["resources"]["requests"]["storage"] == "10"


def test_client_sets_auth_and_tls():
    client, session = _client()
    assert session.headers["Authorization"] == "Bearer tok"
    assert session.verify is False
    assert client.base_url == "https://k8s.example"


def test_store_get():
    client, session = _client(StubResponse(200, TENANT_MANIFEST))
    tenant = KubeTenantStore(client).get("minio-ns", "tenant1", timeout=3)

    assert tenant.name == "tenant1"
    method, url, timeout, _ = session.requests[0]
    assert method == "GET"
    assert url == "https://k8s.example/apis/minio.min.io/v1/namespaces/minio-ns/tenants/tenant1"
    assert timeout == 3


def test_store_get_not_found():
    client, _ = _client(StubResponse(404, {"message": "not found"}))
    with pytest.raises(TenantLookupError) as exc:
        KubeTenantStore(client).get("minio-ns", "tenant1")
    assert exc.value.kind == LookupErrorKind.RESOURCE_NOT_FOUND


def test_store_get_network_failure():
    client, _ = _client(requests.ConnectionError("refused"))
    with pytest.raises(TenantLookupError) as exc:
        KubeTenantStore(client).get("minio-ns", "tenant1")
    assert exc.value.kind == LookupErrorKind.STORE_UNAVAILABLE


def test_store_patch_sends_merge_patch_with_version():
    client, session = _client(StubResponse(200, TENANT_MANIFEST))
    KubeTenantStore(client).patch("minio-ns", "tenant1", {"spec": {"image": "x"}}, resource_version="42")

    method, _, _, kwargs = session.requests[0]
    assert method == "PATCH"
    assert kwargs["headers"]["Content-Type"] == "application/merge-patch+json"
    assert kwargs["json"] == {"spec": {"image": "x"}, "metadata": {"resourceVersion": "42"}}


def test_store_patch_conflict():
    client, _ = _client(StubResponse(409, {"message": "the object has been modified"}))
    with pytest.raises(StoreConflictError):
        KubeTenantStore(client).patch("minio-ns", "tenant1", {"spec": {}}, resource_version="41")


def test_store_patch_failure():
    client, _ = _client(StubResponse(500, None, text="boom"))
    with pytest.raises(StoreWriteError, match="HTTP 500 boom"):
        KubeTenantStore(client).patch("minio-ns", "tenant1", {"spec": {}})


def test_store_delete():
    client, session = _client(StubResponse(200, {}), StubResponse(403, {"message": "forbidden"}))
    store = KubeTenantStore(client)
    store.delete("minio-ns", "tenant1")
    assert session.requests[0][0] == "DELETE"

    with pytest.raises(StoreWriteError, match="forbidden"):
        store.delete("minio-ns", "tenant1")


def test_store_list_all_namespaces():
    client, session = _client(StubResponse(200, {"items": [TENANT_MANIFEST]}))
    tenants = KubeTenantStore(client).list()

    assert [t.name for t in tenants] == ["tenant1"]
    assert session.requests[0][1] == "https://k8s.example/apis/minio.min.io/v1/tenants"


def test_secret_registry_decodes_data():
    payload = {"data": {"accesskey": base64.b64encode(b"access").decode()}}
    client, session = _client(StubResponse(200, payload))
    data = KubeSecretRegistry(client).get("minio-ns", "tenant1-secret")

    assert data == {"accesskey": b"access"}
    assert session.requests[0][1] == "https://k8s.example/api/v1/namespaces/minio-ns/secrets/tenant1-secret"


def test_service_registry():
    payload = {"spec": {"clusterIP": "10.1.1.2", "ports": [{"name": "http-minio", "port": 9000}]}}
    client, _ = _client(StubResponse(200, payload))
    service = KubeServiceRegistry(client).get("minio-ns", "tenant1-minio")

    assert service.cluster_address == "10.1.1.2"
    assert service.port == 9000


def test_service_registry_headless_service():
    client, _ = _client(StubResponse(200, {"spec": {"clusterIP": "None"}}))
    with pytest.raises(ValueError):
        KubeServiceRegistry(client).get("minio-ns", "tenant1-hl")


def _with_storage(name, storage):
    doc = copy.deepcopy(TENANT_MANIFEST)
    doc["metadata"]["name"] = name
    doc["spec"]["zones"][0]["volumeClaimTemplate"]["spec"]["resources"]["requests"]["storage"] = storage
    return doc


def test_tenant_from_manifest_exponent_quantity():
    tenant = tenant_from_manifest(_with_storage("tenant1", "1e6"))
    assert tenant.zones[0].volume_bytes == 1_000_000


def test_unreadable_quantity_leaves_size_unknown():
    tenant = tenant_from_manifest(_with_storage("tenant1", "lots"))

    assert tenant.zones[0].volume_bytes is None
    assert tenant.zones[0].servers == 2
    summary = to_summary(tenant)
    assert summary.total_size == 0
    assert summary.zones[0].volume_configuration.size is None


def test_store_list_survives_unreadable_quantity():
    items = [_with_storage("good", "1Mi"), _with_storage("odd", "1e6"), _with_storage("bad", "lots")]
    client, _ = _client(StubResponse(200, {"items": items}))
    tenants = KubeTenantStore(client).list("minio-ns")

    assert [t.name for t in tenants] == ["good", "odd", "bad"]
    assert [t.zones[0].volume_bytes for t in tenants] == [1_048_576, 1_000_000, None]
