from __future__ import annotations

from dataclasses import dataclass, field

from .conversion import Direction

"""Config dataclasses for the xml2excel converter.

Built by xml2excel.config.loader from the YAML file after schema validation.
"""


@dataclass(frozen=True)
class DatabaseConfig:
    """Document log database settings.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None
    table: str = "converted_documents"

    @property
    def configured(self) -> bool:
        return bool(self.dsn or self.host or self.database)


@dataclass(frozen=True)
class ConvertConfig:
    """Root configuration object for a conversion run."""
    source_directory: str  # 変換元ディレクトリ
    direction: Direction
    destination_directory: str | None = None  # None -> 変換元と同じディレクトリ
    group_naming: str = "path"  # "path" (parent/child) or "local" (旧挙動)
    root_name: str = "Root"
    singular_names: dict[str, str] = field(default_factory=dict)
    settle_seconds: float = 0.5
    poll_interval_seconds: float = 1.0
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
