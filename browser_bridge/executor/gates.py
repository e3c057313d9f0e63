"""Gate evaluation for executor safety checks.

The risk gate looks at what the page currently says (title and text
snippet) before anything runs; a single keyword hit pauses the whole batch
until the orchestrator comes back without the confirmation requirement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from browser_bridge.contracts.snapshot import PageContext

RISK_KEYWORDS: tuple = (
    "purchase",
    "buy",
    "pay",
    "checkout",
    "send",
    "post",
    "delete",
    "confirm",
    "submit order",
    "authorize",
    "install",
)

PAUSED_WARNING = "Execution paused for confirmation."


@dataclass
class GateDecision:
    """Represents the outcome of a gate evaluation."""

    allowed: bool
    needs_consent: bool = False
    reason: Optional[str] = None
    matched: List[str] = field(default_factory=list)

    @property
    def error_message(self) -> Optional[str]:
        if self.allowed:
            return None
        return f"Paused for confirmation. Detected keywords: {', '.join(self.matched)}"


def match_risk_keywords(text: str, keywords: Sequence[str] = RISK_KEYWORDS) -> List[str]:
    """Keywords found in `text` (case-insensitive substring match), in keyword order."""
    lowered = (text or "").lower()
    return [kw for kw in keywords if kw in lowered]


def evaluate_risk_gate(context: PageContext, keywords: Sequence[str] = RISK_KEYWORDS) -> GateDecision:
    haystack = f"{context.title} {context.snippet or ''}"
    matched = match_risk_keywords(haystack, keywords)
    if not matched:
        return GateDecision(allowed=True)
    return GateDecision(allowed=False, needs_consent=True, reason="risk_keywords", matched=matched)


__all__ = ["RISK_KEYWORDS", "PAUSED_WARNING", "GateDecision", "match_risk_keywords", "evaluate_risk_gate"]
