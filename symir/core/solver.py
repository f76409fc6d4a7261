"""Z3 solver wrapper for symir.
This module provides a small interface over the Z3 theorem prover for the
terms produced by the translator: incremental solving, model evaluation and
validity checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import z3

from symir.logging import LogLevel, get_logger


@dataclass
class SolverResult:
    """Result of a satisfiability check."""

    is_sat: bool
    is_unsat: bool
    is_unknown: bool
    model: z3.ModelRef | None = None
    reason: str | None = None

    @staticmethod
    def sat(model: z3.ModelRef) -> SolverResult:
        return SolverResult(is_sat=True, is_unsat=False, is_unknown=False, model=model)

    @staticmethod
    def unsat() -> SolverResult:
        return SolverResult(is_sat=False, is_unsat=True, is_unknown=False)

    @staticmethod
    def unknown(reason: str | None = None) -> SolverResult:
        return SolverResult(is_sat=False, is_unsat=False, is_unknown=True, reason=reason)

    @property
    def status(self) -> str:
        if self.is_sat:
            return "sat"
        if self.is_unsat:
            return "unsat"
        return "unknown"

    def __bool__(self) -> bool:
        return self.is_sat


class SymbolicSolver:
    """High-level Z3 solver wrapper.
    This class provides:
    - Incremental constraint solving with push/pop
    - Evaluation of terms in the last model
    - Implication checks
    - Timeout handling
    """

    def __init__(self, timeout_ms: int = 10000, ctx: z3.Context | None = None) -> None:
        """Initialize the solver.
        Args:
            timeout_ms: Solver timeout in milliseconds (default: 10s).
            ctx: Z3 context the asserted terms live in.
        """
        self.timeout_ms = timeout_ms
        self.ctx = ctx
        self._solver = self._new_solver()
        self._last_model: z3.ModelRef | None = None
        self._query_count = 0
        self._sat_count = 0
        self._unsat_count = 0
        self._unknown_count = 0

    def _new_solver(self) -> z3.Solver:
        solver = z3.Solver(ctx=self.ctx)
        solver.set("timeout", self.timeout_ms)
        return solver

    def reset(self) -> None:
        """Reset the solver state."""
        self._solver.reset()
        self._solver.set("timeout", self.timeout_ms)
        self._last_model = None

    def push(self) -> None:
        """Push a new constraint scope."""
        self._solver.push()

    def pop(self) -> None:
        """Pop the current constraint scope."""
        self._solver.pop()

    def add(self, *constraints: z3.BoolRef) -> None:
        """Add constraints to the solver."""
        self._solver.add(*constraints)

    def assertions(self) -> list[z3.BoolRef]:
        return list(self._solver.assertions())

    def check(self, *assumptions: z3.BoolRef) -> SolverResult:
        """Check satisfiability.
        Args:
            assumptions: Additional assumptions for this check only.
        Returns:
            SolverResult indicating sat/unsat/unknown with optional model.
        """
        self._query_count += 1
        logger = get_logger()
        if logger.is_enabled(LogLevel.TRACE):
            logger.trace(
                f"check with {len(self._solver.assertions())} assertions",
                category="solver",
                assumptions=len(assumptions),
            )
        result = self._solver.check(*assumptions)
        if result == z3.sat:
            self._sat_count += 1
            self._last_model = self._solver.model()
            return SolverResult.sat(self._last_model)
        self._last_model = None
        if result == z3.unsat:
            self._unsat_count += 1
            return SolverResult.unsat()
        self._unknown_count += 1
        reason = self._solver.reason_unknown()
        logger.debug(f"solver returned unknown: {reason}", category="solver")
        return SolverResult.unknown(reason)

    def is_sat(self, constraints: list[z3.BoolRef]) -> bool:
        """Check if constraints are satisfiable together with the asserted ones.
        Args:
            constraints: List of Z3 boolean constraints.
        Returns:
            True if satisfiable, False if unsatisfiable or undecided.
        """
        self.push()
        try:
            self.add(*constraints)
            return self.check().is_sat
        finally:
            self.pop()

    def implies(self, antecedent: z3.BoolRef, consequent: z3.BoolRef) -> bool:
        """Check if antecedent implies consequent.
        Args:
            antecedent: The assumption.
            consequent: The conclusion.
        Returns:
            True if antecedent => consequent is valid.
        """
        solver = self._new_solver()
        solver.add(antecedent, z3.Not(consequent))
        return solver.check() == z3.unsat

    @property
    def model(self) -> z3.ModelRef | None:
        """Model of the last satisfiable check, if any."""
        return self._last_model

    def evaluate(self, term: z3.ExprRef, model_completion: bool = True) -> z3.ExprRef | None:
        """Evaluate a term in the model of the last satisfiable check.
        Returns None when the last check was not satisfiable.
        """
        if self._last_model is None:
            return None
        return self._last_model.eval(term, model_completion=model_completion)

    def simplify(self, expr: z3.ExprRef) -> z3.ExprRef:
        """Simplify a Z3 expression."""
        return z3.simplify(expr)

    def get_stats(self) -> dict[str, int]:
        """Get solver statistics."""
        return {
            "queries": self._query_count,
            "sat": self._sat_count,
            "unsat": self._unsat_count,
            "unknown": self._unknown_count,
        }

    def __repr__(self) -> str:
        return f"SymbolicSolver(queries={self._query_count}, timeout_ms={self.timeout_ms})"


def python_value(value: z3.ExprRef) -> Any:
    """Convert a Z3 numeral or boolean literal to int/bool; other terms are returned as is."""
    if z3.is_int_value(value):
        return value.as_long()
    if z3.is_true(value):
        return True
    if z3.is_false(value):
        return False
    return value


def is_satisfiable(constraints: list[z3.BoolRef]) -> bool:
    """Check if a list of constraints is satisfiable."""
    solver = z3.Solver(ctx=constraints[0].ctx if constraints else None)
    solver.add(constraints)
    return solver.check() == z3.sat


def prove(claim: z3.BoolRef) -> bool:
    """Prove that a claim is always true."""
    solver = z3.Solver(ctx=claim.ctx)
    solver.add(z3.Not(claim))
    return solver.check() == z3.unsat


__all__ = ["SolverResult", "SymbolicSolver", "python_value", "is_satisfiable", "prove"]
