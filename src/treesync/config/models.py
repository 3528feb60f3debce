"""Configuration models describing treesync settings."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class TreesyncBaseModel(BaseModel):
    """Shared configuration for treesync Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class ScanOptions(TreesyncBaseModel):
    """Options governing folder and file enumeration.

    Attributes:
        excluded_folders: Folder names skipped while enumerating subfolders.
        media_extensions: File extensions treated as media files.
        ignored_file_prefixes: File name prefixes never treated as media.
    """

    excluded_folders: List[str] = Field(
        default_factory=lambda: ["Backups", "DeletedFiles", ".vthumb", ".treesync"]
    )
    media_extensions: List[str] = Field(
        default_factory=lambda: [".jpg", ".jpeg", ".avi", ".mp4", ".asf", ".mov"]
    )
    ignored_file_prefixes: List[str] = Field(default_factory=lambda: ["._"])


class NamingOptions(TreesyncBaseModel):
    """Settings for generated folder names.

    Attributes:
        new_folder_name: Default name for created subfolders.
        suffix_separator: Separator placed before numeric collision suffixes.
    """

    new_folder_name: str = "New folder"
    suffix_separator: str = "_"


class ReconcileOptions(TreesyncBaseModel):
    """Reconciliation behavior.

    Attributes:
        warn_on_case_duplicates: Whether to report folders dropped because they
            differ from a known folder only by letter case.
    """

    warn_on_case_duplicates: bool = True


class LoggingSettings(TreesyncBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    max_size_mb: int = 100
    backup_count: int = 5


class CLIOptions(TreesyncBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        show_missing: Whether folders missing on disk are shown in rendered trees.
    """

    quiet_default: bool = False
    show_missing: bool = True


class TreesyncConfig(TreesyncBaseModel):
    """Top-level configuration struct for treesync.

    Attributes:
        scan: Enumeration settings.
        naming: Generated folder name settings.
        reconcile: Reconciliation settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    scan: ScanOptions = Field(default_factory=ScanOptions)
    naming: NamingOptions = Field(default_factory=NamingOptions)
    reconcile: ReconcileOptions = Field(default_factory=ReconcileOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "TreesyncBaseModel",
    "ScanOptions",
    "NamingOptions",
    "ReconcileOptions",
    "LoggingSettings",
    "CLIOptions",
    "TreesyncConfig",
]
