"""AI Agents package."""

from pocketfin.agents.advisor import (
    AdvisorError,
    FinancialAdvisor,
)

__all__ = [
    "AdvisorError",
    "FinancialAdvisor",
]
