"""mw-fleet: Audit and update a MediaWiki installation's repositories."""

# Guard against deleted CWD (e.g. directory removed by another process).
# rich crashes on import if os.getcwd() fails, so recover before any imports.
import os

try:
    os.getcwd()
except (OSError, PermissionError):
    os.chdir(os.path.expanduser("~"))

from ._version import __version__
from .core import (
    ConfirmationGate,
    EvaluationState,
    FleetScanner,
    FleetSummary,
    GitOperations,
    OutputSink,
    PullPrompt,
    RepositoryEvaluator,
    RepositoryKind,
    RepositoryStatus,
    ScanPolicy,
    UpdateTarget,
    app,
    is_mediawiki_installation,
    update_single_repository,
)
from .formatters import OutputFormatter

__all__ = [
    # Version
    "__version__",
    # CLI
    "app",
    # Models
    "EvaluationState",
    "FleetSummary",
    "PullPrompt",
    "RepositoryKind",
    "RepositoryStatus",
    "ScanPolicy",
    "UpdateTarget",
    # Operations
    "ConfirmationGate",
    "FleetScanner",
    "GitOperations",
    "OutputSink",
    "RepositoryEvaluator",
    # Functions
    "is_mediawiki_installation",
    "update_single_repository",
    # Formatters
    "OutputFormatter",
]
