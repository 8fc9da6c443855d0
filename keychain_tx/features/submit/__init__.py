"""Submit feature module: transaction assembly and dispatch."""

from keychain_tx.features.submit.service import (
    Stage,
    SubmitWorkflow,
    WorkflowError,
    WorkflowResult,
)

__all__ = [
    "Stage",
    "SubmitWorkflow",
    "WorkflowError",
    "WorkflowResult",
]
