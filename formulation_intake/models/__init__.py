"""Domain models for the formulation intake tool.

This package contains the domain model classes used throughout the application:
ingredient records and diagnostics produced by the ingestion pipeline, upload
and review workflow state, configuration and batch processing results.
"""

from .config_models import DatabaseConfig, FormulationRules, IntakeConfig, UploadLimits
from .ingredient import (
    CanonicalField,
    Diagnostic,
    DiagnosticCode,
    HeaderMapping,
    IngestionResult,
    IngredientRecord,
)
from .submission import (
    ComplianceOutcome,
    FormulationSubmission,
    PaymentStatus,
    ReviewReport,
    ReviewStatus,
)

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "FormulationRules",
    "IntakeConfig",
    "UploadLimits",
    # Ingestion models
    "CanonicalField",
    "Diagnostic",
    "DiagnosticCode",
    "HeaderMapping",
    "IngestionResult",
    "IngredientRecord",
    # Workflow models
    "ComplianceOutcome",
    "FormulationSubmission",
    "PaymentStatus",
    "ReviewReport",
    "ReviewStatus",
]
