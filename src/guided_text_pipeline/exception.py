# ============================================================================
# src/guided_text_pipeline/exception.py
# ============================================================================
"""Recoverable failures raised by pipeline components and stages.

None of these terminate the process: the controller catches every
``PipelineError`` at the stage boundary, parks the run at its current
state and reports the message so the user can correct the input and retry.
"""

from typing import Iterable, List, Optional


class PipelineError(Exception):
    """Base class for every recoverable pipeline failure."""


class NameMismatchError(PipelineError):
    """A selected file does not carry the fixed name expected for its role."""

    def __init__(self, role: str, uploaded: str, expected: str):
        self.role = role
        self.uploaded = uploaded
        self.expected = expected
        super().__init__(
            f'Name mismatch. Uploaded: "{uploaded}". Expected: "{expected}".'
        )


class ParseStructuralError(PipelineError):
    """The CSV parser itself failed for one or more roles."""

    def __init__(self, errors: dict):
        # role -> parser message
        self.errors = dict(errors)
        details = "; ".join(f"{role}: {msg}" for role, msg in self.errors.items())
        super().__init__(f"Failed to parse dataset file(s) - {details}")

    @property
    def roles(self) -> List[str]:
        return list(self.errors)


class EmptyDatasetError(PipelineError):
    """One or more roles hold zero usable rows."""

    def __init__(self, roles: Iterable[str], reason: Optional[str] = None):
        self.roles = list(roles)
        reason = reason or "contains no data rows"
        super().__init__(
            f"Dataset(s) {', '.join(self.roles)} {reason}. "
            "Please check the file content and select the files again."
        )


class EncodingError(PipelineError):
    """Normalized rows could not be converted into integer sequences."""


class TrainingFailure(PipelineError):
    """The classifier collaborator failed while fitting."""


class EvaluationFailure(PipelineError):
    """The classifier collaborator failed while evaluating."""


class PredictionFailure(PipelineError):
    """A single-text prediction could not be produced."""


class StageOrderError(PipelineError):
    """A stage was invoked before its prerequisite stage succeeded."""

    def __init__(self, operation: str, required: str, current: str):
        self.operation = operation
        self.required = required
        self.current = current
        super().__init__(
            f"Cannot run '{operation}' yet: requires state '{required}', "
            f"pipeline is at '{current}'"
        )
