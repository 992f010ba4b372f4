"""Result models — calculation output contracts."""

from lease_engine.models.results import (
    AnnualExpenseRow,
    CalculationResult,
    CashflowRow,
    DepreciationRow,
    InitialMeasurement,
    JournalEntry,
    JournalEntrySet,
    LeaseDisclosure,
    MaturityBucket,
    PortfolioDisclosure,
    PortfolioResult,
)

__all__ = [
    "AnnualExpenseRow",
    "CalculationResult",
    "CashflowRow",
    "DepreciationRow",
    "InitialMeasurement",
    "JournalEntry",
    "JournalEntrySet",
    "LeaseDisclosure",
    "MaturityBucket",
    "PortfolioDisclosure",
    "PortfolioResult",
]
