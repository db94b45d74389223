import os
from dataclasses import dataclass
from typing import Optional

# Optional: load a local .env file if present.
try:
    from dotenv import load_dotenv

    load_dotenv()
except Exception:
    # If python-dotenv isn't installed or .env isn't present, that's fine.
    pass


# Placeholder shipped by the first deployments. Never accept it as a real secret.
INSECURE_ADMIN_SECRET = "CHANGE_ME_NOW"


class ConfigError(ValueError):
    """Raised when the runtime configuration is unusable."""


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Returns:
      - True/False if the env var is set to a recognizable value
      - default if unset or unrecognized

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    IMPORTANT: Provide ADMIN_SECRET via environment variables or a .env file.
    Do not hardcode secrets in source code.
    """

    # -----------------
    # Storage
    # -----------------
    # SQLite file (Render persistent disk by default). `sqlite:///path` is accepted too.
    DB_PATH: str = "/data/vip.sqlite"

    # -----------------
    # Admin
    # -----------------
    # Shared secret expected in the `x-admin-secret` header on /api/admin/*.
    ADMIN_SECRET: str = INSECURE_ADMIN_SECRET

    # Local development only: accept the placeholder secret instead of failing startup.
    ALLOW_INSECURE_ADMIN_SECRET: bool = False

    # Static admin UI bundle served under /admin (skipped when the directory is missing).
    ADMIN_STATIC_DIR: str = "./admin"

    # -----------------
    # HTTP
    # -----------------
    HOST: str = "0.0.0.0"
    PORT: int = 10000

    # Comma-separated origins; "*" keeps the API open to any client (EA / browser tools).
    CORS_ALLOW_ORIGINS: str = "*"

    def validate(self) -> "Config":
        """Fail fast on settings the service must not run with."""
        if not (self.DB_PATH or "").strip():
            raise ConfigError("DB_PATH is empty")

        secret = self.ADMIN_SECRET or ""
        if not secret.strip():
            raise ConfigError("ADMIN_SECRET is not set")
        if secret == INSECURE_ADMIN_SECRET and not self.ALLOW_INSECURE_ADMIN_SECRET:
            raise ConfigError(
                "ADMIN_SECRET is still the placeholder value. "
                "Set ADMIN_SECRET to a strong random value."
            )

        if not (0 < int(self.PORT) < 65536):
            raise ConfigError(f"invalid PORT: {self.PORT}")
        return self

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in (self.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]


def load_config() -> Config:
    """Build a Config from the current environment."""
    return Config(
        DB_PATH=(
            os.environ.get("VIP_DB_PATH")
            or os.environ.get("DB_PATH")
            or Config.DB_PATH
        ),
        ADMIN_SECRET=os.environ.get("ADMIN_SECRET", INSECURE_ADMIN_SECRET),
        ALLOW_INSECURE_ADMIN_SECRET=_env_bool("ALLOW_INSECURE_ADMIN_SECRET", False) is True,
        ADMIN_STATIC_DIR=os.environ.get("ADMIN_STATIC_DIR", Config.ADMIN_STATIC_DIR),
        HOST=os.environ.get("API_HOST", Config.HOST),
        PORT=int(os.environ.get("PORT") or os.environ.get("API_PORT") or Config.PORT),
        CORS_ALLOW_ORIGINS=os.environ.get("CORS_ALLOW_ORIGINS", Config.CORS_ALLOW_ORIGINS),
    )
