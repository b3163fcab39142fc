"""Centralized configuration for the Ecuro MCP server.

Secret resolution order (per variable):
  1. Environment variable / ``.env`` file  (local dev)
  2. AWS SSM Parameter Store SecureString  (when ``AWS_EXECUTION_ENV`` is set)

The SSM paths follow the convention ``/ecuro-mcp/<VARIABLE_NAME>``.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# ── Feature flag: running on AWS? ────────────────────────────────────
_ON_AWS = bool(os.getenv("AWS_EXECUTION_ENV"))


# ── Secret resolution ────────────────────────────────────────────────

def _get_ssm_parameter(name: str) -> str | None:
    """Fetch a SecureString from SSM Parameter Store.

    Returns ``None`` if the parameter does not exist or boto3 is
    unavailable.  Errors are logged but never raised so that local-dev
    fallback still works.
    """
    try:
        import boto3  # noqa: PLC0415 (lazy: boto3 is an optional extra)

        ssm = boto3.client("ssm")
        resp = ssm.get_parameter(Name=f"/ecuro-mcp/{name}", WithDecryption=True)
        return resp["Parameter"]["Value"]
    except Exception:
        logger.debug("SSM lookup for %s failed (expected locally)", name)
        return None


def _require_env(name: str) -> str:
    """Return a config value from env-var or SSM, or raise a clear error."""
    value = os.getenv(name)
    if value and not value.startswith("your_"):
        return value

    if _ON_AWS:
        ssm_value = _get_ssm_parameter(name)
        if ssm_value:
            return ssm_value

    raise OSError(
        f"Missing required configuration: {name}. "
        f"Set it in .env (local) or SSM Parameter Store /ecuro-mcp/{name} (AWS)."
    )


# ── Server identity ─────────────────────────────────────────────────
SERVER_NAME = "ecuro-mcp-server"
SERVER_VERSION = "2.0.0"

# ── Ecuro Light API ─────────────────────────────────────────────────
ECURO_API_BASE_URL: str = os.getenv(
    "ECURO_API_BASE_URL",
    "https://clinics.api.ecuro.com.br/api/v1/ecuro-light",
)
ECURO_ACCESS_TOKEN: str = _require_env("ECURO_ACCESS_TOKEN")
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

# ── Transport / server ──────────────────────────────────────────────
TRANSPORT: str = os.getenv("TRANSPORT", "stdio").lower()
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("PORT", "3000"))
SESSION_IDLE_TIMEOUT_SECONDS: float = float(os.getenv("SESSION_IDLE_TIMEOUT_SECONDS", "1800"))

# ── Dentist directory (Supabase) ────────────────────────────────────
# Optional: only the ecuro_get_dentist_* tools need them, and they report
# the missing configuration as a tool error.
SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")
