"""Domain models for the census formatter.

This package contains the record, schema, diagnostics and result types used
throughout the normalization pipeline and the batch CLI.
"""

from .anomaly import Anomaly
from .batch_result import BatchResult, FileStat
from .cell import EMPTY, Cell, Empty, Number, Text, cell_text, to_cell
from .census_file import CensusFile, FileStatus
from .census_record import CensusRecord, Relationship
from .field_schema import (
    CENSUS_FIELDS,
    EMPLOYEE_ONLY_FIELDS,
    REQUIRED_FIELD_KEYS,
    FieldDefinition,
    FieldMapping,
)
from .validation_result import ValidationIssue, ValidationResult, ValidationSummary

__all__ = [
    # Cells
    "Cell",
    "Empty",
    "Text",
    "Number",
    "EMPTY",
    "to_cell",
    "cell_text",
    # Schema
    "FieldDefinition",
    "FieldMapping",
    "CENSUS_FIELDS",
    "REQUIRED_FIELD_KEYS",
    "EMPLOYEE_ONLY_FIELDS",
    # Records
    "CensusRecord",
    "Relationship",
    "Anomaly",
    # Results
    "ValidationIssue",
    "ValidationResult",
    "ValidationSummary",
    "CensusFile",
    "FileStatus",
    "BatchResult",
    "FileStat",
]
