"""Configuration for grue."""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class Config:
    """Application configuration."""

    database_url: str = "sqlite:///./grue.db"
    host: str = "localhost"
    port: int = 1965
    certfile: Path | None = None
    keyfile: Path | None = None
    log_level: str = "INFO"
    log_file: Path | None = None
    json_logs: bool = False
    hash_fingerprints: bool = True
    # Seeds each game's random source; None leaves it unseeded
    seed: int | None = None

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        certfile = os.getenv("GRUE_CERTFILE")
        keyfile = os.getenv("GRUE_KEYFILE")
        log_file = os.getenv("GRUE_LOG_FILE")
        seed = os.getenv("GRUE_SEED")

        return cls(
            database_url=os.getenv("GRUE_DATABASE_URL", cls.database_url),
            host=os.getenv("GRUE_HOST", cls.host),
            port=int(os.getenv("GRUE_PORT", str(cls.port))),
            certfile=Path(certfile) if certfile else None,
            keyfile=Path(keyfile) if keyfile else None,
            log_level=os.getenv("GRUE_LOG_LEVEL", cls.log_level),
            log_file=Path(log_file) if log_file else None,
            json_logs=os.getenv("GRUE_JSON_LOGS", "").lower() in ("true", "1", "yes"),
            hash_fingerprints=os.getenv("GRUE_HASH_FINGERPRINTS", "true").lower()
            not in ("false", "0", "no"),
            seed=int(seed) if seed else None,
        )
