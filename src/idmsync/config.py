"""
Runtime configuration.

SyncSettings holds everything needed to talk to one IDM instance and is built
from CLI flags, falling back to IDMSYNC_* environment variables. SyncContext is
the small per-call value the orchestrators receive instead of reading process
state.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from . import __version__

CLOUD_DEPLOYMENT = "cloud"
FORGEOPS_DEPLOYMENT = "forgeops"
CLASSIC_DEPLOYMENT = "classic"
DEPLOYMENT_TYPES = (CLOUD_DEPLOYMENT, FORGEOPS_DEPLOYMENT, CLASSIC_DEPLOYMENT)

DEFAULT_EXPORT_WORKERS = 8
ENV_PREFIX = "IDMSYNC_"


@dataclass(frozen=True)
class SyncContext:
    deployment_type: str = CLASSIC_DEPLOYMENT
    origin: str = ""
    exported_by: str = ""
    tool_version: str = __version__


@dataclass(frozen=True)
class SyncSettings:
    base_url: str
    token: Optional[str] = None
    deployment_type: str = CLASSIC_DEPLOYMENT
    username: str = ""
    export_workers: int = DEFAULT_EXPORT_WORKERS
    timeout: float = 30.0
    verify_tls: bool = True
    policy_file: Optional[Path] = None
    # None defers to the policy file, then to case-sensitive matching
    case_sensitive: Optional[bool] = None

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("An IDM base URL is required")
        if self.deployment_type not in DEPLOYMENT_TYPES:
            raise ValueError(
                f"Unknown deployment type {self.deployment_type!r}; "
                f"expected one of {', '.join(DEPLOYMENT_TYPES)}"
            )
        if self.export_workers < 0:
            raise ValueError("export_workers must be >= 0 (0 means unbounded)")

    def context(self) -> SyncContext:
        return SyncContext(
            deployment_type=self.deployment_type,
            origin=self.base_url,
            exported_by=self.username,
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, **overrides) -> "SyncSettings":
        """Build settings from IDMSYNC_* variables; non-None overrides win."""
        env = os.environ if env is None else env

        def _get(name: str) -> Optional[str]:
            value = env.get(ENV_PREFIX + name)
            return value if value not in (None, "") else None

        def _flag(value: Optional[str]) -> Optional[bool]:
            return None if value is None else value.lower() not in ("0", "false", "no")

        values = {
            "base_url": _get("BASE_URL") or "",
            "token": _get("TOKEN"),
            "deployment_type": _get("DEPLOYMENT_TYPE") or CLASSIC_DEPLOYMENT,
            "username": _get("USERNAME") or "",
            "export_workers": int(_get("EXPORT_WORKERS") or DEFAULT_EXPORT_WORKERS),
            "timeout": float(_get("TIMEOUT") or 30.0),
            "verify_tls": (_get("VERIFY_TLS") or "true").lower() not in ("0", "false", "no"),
            "policy_file": Path(_get("POLICY_FILE")) if _get("POLICY_FILE") else None,
            "case_sensitive": _flag(_get("CASE_SENSITIVE")),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


__all__ = [
    "CLOUD_DEPLOYMENT",
    "FORGEOPS_DEPLOYMENT",
    "CLASSIC_DEPLOYMENT",
    "DEPLOYMENT_TYPES",
    "DEFAULT_EXPORT_WORKERS",
    "SyncContext",
    "SyncSettings",
]
