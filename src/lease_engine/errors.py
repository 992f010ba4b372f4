"""Error taxonomy.

Every failure is deterministic: the same ``LeaseTerms`` always fails the
same way, so nothing here is retryable.  Callers correct the input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

IssueCode = Literal[
    "MissingField",
    "InvalidNumber",
    "InvalidDate",
    "OutOfRangeRate",
    "InvalidChoice",
    "OutOfRange",
]


@dataclass(frozen=True)
class FieldIssue:
    """One offending input field."""

    field: str
    code: IssueCode
    message: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "code": self.code, "message": self.message, "value": self.value}


class LeaseEngineError(Exception):
    """Base class for all engine failures."""


class LeaseValidationError(LeaseEngineError):
    """Bad or missing input fields.

    Carries the complete list of issues so a form can highlight every
    offending field in one pass.
    """

    def __init__(self, issues: list[FieldIssue]):
        self.issues = list(issues)
        summary = "; ".join(f"{i.field}: {i.code}" for i in self.issues)
        super().__init__(f"{len(self.issues)} invalid lease field(s): {summary}")

    @property
    def fields(self) -> list[str]:
        return [i.field for i in self.issues]

    def codes_for(self, field: str) -> list[IssueCode]:
        return [i.code for i in self.issues if i.field == field]


class DegenerateRateError(LeaseEngineError):
    """Per-period rate is zero or there are no payment periods; the annuity factor is undefined."""


class ScheduleDivergenceError(LeaseEngineError):
    """The final-period rounding correction exceeds the materiality threshold.

    Indicates the liability and the payment stream disagree upstream, not a
    rounding artifact.
    """

    def __init__(self, correction: float, threshold: float, periods: int):
        self.correction = correction
        self.threshold = threshold
        self.periods = periods
        super().__init__(
            f"final-period correction {correction:.4f} exceeds threshold "
            f"{threshold:.4f} over {periods} periods"
        )
