import os


def _int_env(name: str, default: int) -> int:
    raw = str(os.getenv(name, str(default))).strip()
    try:
        return int(raw)
    except Exception:
        return default


def _float_env(name: str, default: float) -> float:
    raw = str(os.getenv(name, str(default))).strip()
    try:
        return float(raw)
    except Exception:
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = str(os.getenv(name, "")).strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


CONSOLE_API_PORT = _int_env("CONSOLE_API_PORT", 9090)
CONSOLE_BIND_HOST = str(os.getenv("CONSOLE_BIND_HOST", "0.0.0.0")).strip()

# Orchestrator (Kubernetes API server)
K8S_API_URL = str(os.getenv("CONSOLE_K8S_API_URL", "https://kubernetes.default.svc")).strip()
K8S_TOKEN = str(os.getenv("CONSOLE_K8S_TOKEN", "")).strip()
K8S_TOKEN_FILE = str(
    os.getenv("CONSOLE_K8S_TOKEN_FILE", "/var/run/secrets/kubernetes.io/serviceaccount/token")
).strip()
K8S_CA_FILE = str(
    os.getenv("CONSOLE_K8S_CA_FILE", "/var/run/secrets/kubernetes.io/serviceaccount/ca.crt")
).strip()
K8S_VERIFY_TLS = _bool_env("CONSOLE_K8S_VERIFY_TLS", True)

TENANT_API_GROUP = str(os.getenv("CONSOLE_TENANT_API_GROUP", "minio.min.io")).strip()
TENANT_API_VERSION = str(os.getenv("CONSOLE_TENANT_API_VERSION", "v1")).strip()

# Tenant admin API
TENANT_ADMIN_PORT = _int_env("CONSOLE_TENANT_ADMIN_PORT", 9000)
TENANT_ADMIN_SCHEME = str(os.getenv("CONSOLE_TENANT_ADMIN_SCHEME", "http")).strip().lower()
TENANT_ADMIN_INSECURE = _bool_env("CONSOLE_TENANT_ADMIN_INSECURE", False)

RELEASE_URL = str(
    os.getenv("CONSOLE_RELEASE_URL", "https://dl.min.io/server/minio/release/linux-amd64/")
).strip()

OPERATION_TIMEOUT_SECONDS = _float_env("CONSOLE_OPERATION_TIMEOUT_SECONDS", 20.0)
CONFLICT_RETRIES = _int_env("CONSOLE_CONFLICT_RETRIES", 5)
