"""
Index suggestion wizard - graph construction, valuation and tour solving.

Module responsibilities:
- models.py: Node, Link, OverlapEntry, QualCollection
- links.py: merge-join link builder (make_links, compute_links)
- valuation.py: LinkValuator and the link_cost fallback
- suggest.py: suggestion side-channel (SuggestionRequester implementations)
- solver.py: GreedySolver, InsertionSolver, compute_distance
- wizard.py: Wizard, the controller owning the graph
"""

from qualwizard.wizard.links import compute_links, make_links
from qualwizard.wizard.models import (
    START_NODE_ID,
    Link,
    Node,
    NodeKind,
    OverlapEntry,
    QualCollection,
)
from qualwizard.wizard.solver import (
    GreedySolver,
    InsertionSolver,
    PathSolver,
    compute_distance,
    get_solver,
    path_to_links,
)
from qualwizard.wizard.suggest import (
    HttpSuggestionRequester,
    NullSuggestionRequester,
    SuggestionRequest,
    SuggestionRequester,
    requester_from_config,
)
from qualwizard.wizard.valuation import LinkValuator, link_cost
from qualwizard.wizard.wizard import ProgressEvent, Wizard

__all__ = [
    "START_NODE_ID",
    "Link",
    "Node",
    "NodeKind",
    "OverlapEntry",
    "QualCollection",
    "make_links",
    "compute_links",
    "LinkValuator",
    "link_cost",
    "SuggestionRequest",
    "SuggestionRequester",
    "HttpSuggestionRequester",
    "NullSuggestionRequester",
    "requester_from_config",
    "PathSolver",
    "GreedySolver",
    "InsertionSolver",
    "compute_distance",
    "path_to_links",
    "get_solver",
    "ProgressEvent",
    "Wizard",
]
