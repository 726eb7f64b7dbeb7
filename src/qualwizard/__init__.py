"""qualwizard - index suggestion wizard for PostgreSQL workload predicates."""

__version__ = "0.1.0"
__license__ = "MIT"

# Exception hierarchy (import first so other modules can use it)
from qualwizard.exceptions import (
    QualWizardError,
    ConfigurationError,
    ParseError,
    DataSourceNotFoundError,
    GraphError,
    MixedRelationError,
    UncomputablePathError,
    PassInProgressError,
    SuggestionError,
)

from qualwizard.config import (
    Config,
    Environment,
    SolverStrategy,
    get_config,
)
from qualwizard.datasource import DataSource, DataSourceRegistry
from qualwizard.parser import Qual, QualBatch, parse_batches
from qualwizard.wizard import (
    GreedySolver,
    HttpSuggestionRequester,
    InsertionSolver,
    Link,
    Node,
    NodeKind,
    OverlapEntry,
    ProgressEvent,
    SuggestionRequester,
    Wizard,
    compute_distance,
    compute_links,
    make_links,
)

__all__ = [
    # Exception hierarchy
    "QualWizardError",
    "ConfigurationError",
    "ParseError",
    "DataSourceNotFoundError",
    "GraphError",
    "MixedRelationError",
    "UncomputablePathError",
    "PassInProgressError",
    "SuggestionError",
    # Configuration
    "Config",
    "Environment",
    "SolverStrategy",
    "get_config",
    # Input
    "DataSource",
    "DataSourceRegistry",
    "Qual",
    "QualBatch",
    "parse_batches",
    # Graph
    "Node",
    "NodeKind",
    "Link",
    "OverlapEntry",
    "make_links",
    "compute_links",
    "compute_distance",
    "GreedySolver",
    "InsertionSolver",
    "SuggestionRequester",
    "HttpSuggestionRequester",
    "ProgressEvent",
    "Wizard",
    # Metadata
    "__version__",
    "__license__",
]
