"""Building blocks shared by the migration stages."""

from .base_pipeline import Outcome, OutcomeCounters, RecordPipeline
from .dates import SENTINEL_DATE, parse_amount, parse_date
from .normalizers import FieldNormalizer
from .resolver import IdentifierPolicy, ReferenceResolver, build_reference_table

__all__ = [
    "Outcome",
    "OutcomeCounters",
    "RecordPipeline",
    "SENTINEL_DATE",
    "parse_amount",
    "parse_date",
    "FieldNormalizer",
    "IdentifierPolicy",
    "ReferenceResolver",
    "build_reference_table",
]
