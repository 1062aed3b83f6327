"""Environment-driven configuration for stagechain."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class Settings:
    """Runtime settings loaded from environment variables."""

    chain_file: Path
    schema_dir: Path
    log_level: str

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from environment variables with sensible defaults."""

        chain_file = Path(os.getenv("STAGECHAIN_CHAIN_FILE", "config/chain.yaml"))
        schema_dir = Path(os.getenv("STAGECHAIN_SCHEMA_DIR", "config/schemas"))
        log_level = os.getenv("LOG_LEVEL", "INFO")
        return cls(chain_file=chain_file, schema_dir=schema_dir, log_level=log_level)

    def resolve_schema(self, reference: str | Path) -> Path:
        """Resolve a schema reference against :attr:`schema_dir` when relative."""

        path = Path(reference)
        if path.is_absolute() or path.exists():
            return path
        return self.schema_dir / path
