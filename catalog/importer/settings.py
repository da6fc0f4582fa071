"""Import settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_SKIP_IMAGE_PATTERNS = ("ChristmasPua.png", "HafalohaLogo", "logo", "placeholder")


@dataclass(slots=True, frozen=True)
class ImportSettings:
    batch_size: int = 5
    max_concurrent_downloads: int = 5
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    skip_image_patterns: tuple[str, ...] = DEFAULT_SKIP_IMAGE_PATTERNS
    upload_dir: Path = Path("tmp/imports")
    user_agent: str = "CatalogImporter/1.0"
    stale_after_minutes: int = 30

    @classmethod
    def from_env(cls) -> "ImportSettings":
        patterns = os.environ.get("IMPORT_SKIP_IMAGE_PATTERNS")
        return cls(
            batch_size=int(os.environ.get("IMPORT_BATCH_SIZE", 5)),
            max_concurrent_downloads=int(os.environ.get("IMPORT_MAX_DOWNLOADS", 5)),
            connect_timeout=float(os.environ.get("IMPORT_CONNECT_TIMEOUT", 10.0)),
            read_timeout=float(os.environ.get("IMPORT_READ_TIMEOUT", 30.0)),
            skip_image_patterns=(
                tuple(p.strip() for p in patterns.split(",") if p.strip())
                if patterns
                else DEFAULT_SKIP_IMAGE_PATTERNS
            ),
            upload_dir=Path(os.environ.get("IMPORT_UPLOAD_DIR", "tmp/imports")),
            stale_after_minutes=int(os.environ.get("IMPORT_STALE_MINUTES", 30)),
        )
