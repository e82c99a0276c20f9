"""
Credential & endpoint resolution for a tenant's internal admin API.

Steps:
1. Fetch the tenant credential secret (<tenant>-secret)
2. Extract accesskey / secretkey (both mandatory)
3. Fetch the tenant's internal service
4. Build the endpoint from the service cluster address and scheme
5. Construct the admin client (no network call at construction time)
"""

import logging
from typing import Callable, Optional

import requests

from console.config import TENANT_ADMIN_PORT
from console.deadline import Deadline
from console.errors import LookupErrorKind, OperationTimeout, TenantLookupError
from console.models import Credential, Endpoint
from console.orchestrator import SecretRegistry, ServiceRegistry

logger = logging.getLogger(__name__)

ACCESS_KEY_FIELD = "accesskey"
SECRET_KEY_FIELD = "secretkey"
HEALTH_PATH = "/minio/health/live"


def tenant_secret_name(tenant_name: str) -> str:
    return f"{tenant_name}-secret"


def tenant_service_name(tenant_name: str) -> str:
    return f"{tenant_name}-minio"


class AdminClient:
    """Authenticated handle on a tenant's admin API."""

    def __init__(self, endpoint: Endpoint, credential: Credential, insecure: bool = False):
        self.endpoint = endpoint
        self.credential = credential
        self.insecure = insecure
        self.session = requests.Session()
        self.session.verify = not insecure

    def health(self, timeout: Optional[float] = None) -> bool:
        """Probe the tenant liveness endpoint. Returns False when unreachable."""
        url = f"{self.endpoint.url}{HEALTH_PATH}"
        try:
            response = self.session.get(url, timeout=timeout)
        except requests.RequestException as e:
            logger.warning(f"Tenant health probe to {url} failed: {e}")
            return False
        return response.status_code == 200

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "AdminClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


AdminClientFactory = Callable[[Endpoint, Credential, bool], AdminClient]


def build_admin_client(endpoint: Endpoint, credential: Credential, insecure: bool) -> AdminClient:
    return AdminClient(endpoint, credential, insecure=insecure)


def _decode(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def resolve_admin_client(
    secrets: SecretRegistry,
    services: ServiceRegistry,
    namespace: str,
    tenant_name: str,
    service_name: Optional[str] = None,
    scheme: str = "http",
    insecure: bool = False,
    factory: AdminClientFactory = build_admin_client,
    deadline: Optional[Deadline] = None,
) -> AdminClient:
    """
    Resolve a ready-to-use admin client for a tenant.

    Both lookups are mandatory; the client is only constructed once the
    credential and the endpoint are complete.

    Raises:
        TenantLookupError: SecretLookupFailed, IncompleteCredentials or
            ServiceLookupFailed
        OperationTimeout: if the deadline runs out between calls
    """
    deadline = deadline or Deadline()
    secret_name = tenant_secret_name(tenant_name)
    service_name = service_name or tenant_service_name(tenant_name)

    try:
        data = secrets.get(namespace, secret_name, timeout=deadline.timeout())
    except OperationTimeout:
        raise
    except Exception as e:
        logger.error(f"Secret lookup {namespace}/{secret_name} failed: {e}")
        raise TenantLookupError(
            LookupErrorKind.SECRET_LOOKUP_FAILED, f"Unable to read credentials for tenant '{tenant_name}'"
        ) from e

    if not data.get(ACCESS_KEY_FIELD):
        raise TenantLookupError(LookupErrorKind.INCOMPLETE_CREDENTIALS, "accesskey not provided")
    if not data.get(SECRET_KEY_FIELD):
        raise TenantLookupError(LookupErrorKind.INCOMPLETE_CREDENTIALS, "secretkey not provided")
    try:
        credential = Credential(
            access_key=_decode(data[ACCESS_KEY_FIELD]), secret_key=_decode(data[SECRET_KEY_FIELD])
        )
    except UnicodeDecodeError as e:
        raise TenantLookupError(
            LookupErrorKind.INCOMPLETE_CREDENTIALS, f"Credentials for tenant '{tenant_name}' are not valid UTF-8"
        ) from e

    try:
        service = services.get(namespace, service_name, timeout=deadline.timeout())
    except OperationTimeout:
        raise
    except Exception as e:
        logger.error(f"Service lookup {namespace}/{service_name} failed: {e}")
        raise TenantLookupError(
            LookupErrorKind.SERVICE_LOOKUP_FAILED, f"Unable to resolve service '{service_name}'"
        ) from e

    endpoint = Endpoint(scheme=scheme, host=service.cluster_address, port=service.port or TENANT_ADMIN_PORT)
    logger.debug(f"Resolved admin endpoint for {namespace}/{tenant_name}: {endpoint.url}")
    return factory(endpoint, credential, insecure)
