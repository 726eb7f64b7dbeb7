"""Qual batch parsing module."""

from qualwizard.exceptions import ParseError
from qualwizard.parser.config import DEFAULT_CONFIG, STRICT_CONFIG, ParserConfig
from qualwizard.parser.models import Qual, QualBatch, qual_comparator
from qualwizard.parser.parser import parse_batches

__all__ = [
    "Qual",
    "QualBatch",
    "qual_comparator",
    "parse_batches",
    "ParseError",
    "ParserConfig",
    "DEFAULT_CONFIG",
    "STRICT_CONFIG",
]
