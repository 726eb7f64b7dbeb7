"""
Parser configuration with resource limits.

These limits keep a pathological collector dump from exhausting memory.
The link builder is quadratic in the number of batches and the insertion
solver is worse, so the batch limit matters more than the file size.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ParserConfig(BaseModel):
    """
    Configuration for the qual batch parser with resource limits.

    Attributes:
        max_file_size_mb: Maximum file size to parse.
        max_batches: Maximum number of batches (graph nodes) in one input.
        max_quals_per_batch: Maximum number of quals in a single batch.

    Example:
        # Stricter limits for a web API
        config = ParserConfig(max_file_size_mb=1, max_batches=100)
    """

    max_file_size_mb: float = Field(
        default=50.0,
        gt=0,
        description="Maximum file size in megabytes",
    )

    max_batches: int = Field(
        default=1_000,
        gt=0,
        description="Maximum number of qual batches",
    )

    max_quals_per_batch: int = Field(
        default=256,
        gt=0,
        description="Maximum number of quals in one batch",
    )


DEFAULT_CONFIG = ParserConfig()

# Stricter limits for untrusted input
STRICT_CONFIG = ParserConfig(
    max_file_size_mb=5.0,
    max_batches=100,
    max_quals_per_batch=32,
)
