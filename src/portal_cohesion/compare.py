"""
portal_cohesion - Identifier set comparison.

Runs the fixed comparison table over extracted identifier sets.
Every comparison is one-directional; bidirectional consistency needs
two entries in the table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping

from .config import Comparison
from .extract import IdentifierSet

logger = logging.getLogger(__name__)


def diff(left: Iterable[str], right: Iterable[str], allowed: Iterable[str] = ()) -> list[str]:
    """Tokens in *left* absent from *right* and not in *allowed*, sorted and unique."""
    return sorted(set(left) - set(right) - set(allowed))


@dataclass(frozen=True)
class DriftResult:
    """Outcome of one comparison."""
    comparison: Comparison
    missing: tuple[str, ...]
    status: str  # "ok" | "drift" | "unavailable"

    @property
    def failed(self) -> bool:
        """True when this result should fail the run."""
        return self.comparison.is_hard and self.status != "ok"


def compare_sets(
    sets: Mapping[str, IdentifierSet],
    comparisons: Iterable[Comparison],
    always_allowed: Iterable[str] = (),
) -> list[DriftResult]:
    """Run every comparison in order and return one result each."""
    base_allowed = frozenset(always_allowed)
    results: list[DriftResult] = []

    for comp in comparisons:
        left = sets.get(comp.left)
        right = sets.get(comp.right)
        if left is None or right is None or not left.available or not right.available:
            logger.debug("Comparison '%s' unavailable", comp.title)
            results.append(DriftResult(comp, (), "unavailable"))
            continue

        missing = diff(left.tokens, right.tokens, base_allowed | comp.allowed)
        status = "drift" if missing else "ok"
        if missing:
            logger.debug("%s: %s", comp.title, ", ".join(missing))
        results.append(DriftResult(comp, tuple(missing), status))

    return results
