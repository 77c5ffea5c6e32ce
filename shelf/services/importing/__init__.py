"""
Package du workflow d'import de disques.

Reexporte les symboles principaux (from shelf.services.importing import ...).
"""

from .executor import ImportExecutor, ImportPlan, ImportPlanError, ImportResult
from .store import ImportSessionStore
from .workflow import ImportValidationError, ImportWorkflowService, SessionNotFoundError

__all__ = [
    "ImportExecutor",
    "ImportPlan",
    "ImportPlanError",
    "ImportResult",
    "ImportSessionStore",
    "ImportValidationError",
    "ImportWorkflowService",
    "SessionNotFoundError",
]
