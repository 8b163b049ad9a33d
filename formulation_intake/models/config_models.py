from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the formulation intake tool.

Built by config.loader from config/intake.yml after schema validation. Every
section except source_directory is optional; the defaults below mirror the
limits enforced by the upload form.
"""

__all__ = [
    "DatabaseConfig",
    "UploadLimits",
    "FormulationRules",
    "IntakeConfig",
]

DEFAULT_MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class UploadLimits:
    """File level checks applied before a workbook is decoded."""
    allowed_extensions: tuple[str, ...] = (".xlsx", ".xls")
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES

    @property
    def max_file_size_mb(self) -> int:
        return self.max_file_size_bytes // (1024 * 1024)


@dataclass(frozen=True)
class FormulationRules:
    """Bounds used by the formulation validator.

    Per ingredient concentration must lie in [min_concentration, max_concentration];
    the sum of all concentrations must lie in [total_lower_bound, total_upper_bound].
    Both intervals are inclusive.
    """
    min_concentration: float = 0.0
    max_concentration: float = 100.0
    total_lower_bound: float = 95.0
    total_upper_bound: float = 105.0

    def __post_init__(self) -> None:
        if self.min_concentration > self.max_concentration:
            raise ValueError("min_concentration must not exceed max_concentration")
        if self.total_lower_bound > self.total_upper_bound:
            raise ValueError("total_lower_bound must not exceed total_upper_bound")


@dataclass(frozen=True)
class IntakeConfig:
    """Root configuration object for the intake process."""
    source_directory: str  # Directory scanned for uploaded workbooks
    upload: UploadLimits = field(default_factory=UploadLimits)
    rules: FormulationRules = field(default_factory=FormulationRules)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
