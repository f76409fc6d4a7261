"""Analysis sessions.
A session bundles the per-analysis state: one heap, one translator and one
solver, configured from a SymirConfig. Queries take IR expressions and handle
translation themselves.
"""

from __future__ import annotations

from typing import Any

import z3

from symir.config import SymirConfig
from symir.core.errors import SymbolicTypeError
from symir.core.expressions import Expression, Variable
from symir.core.memory import Memory
from symir.core.solver import SolverResult, SymbolicSolver, python_value
from symir.core.types import OBJECT
from symir.logging import get_logger
from symir.translation.z3_translator import Z3Translator


class AnalysisSession:
    """Memory, translator and solver of one analysis.
    Example:
        session = AnalysisSession()
        x = Variable("x", INT)
        session.assume(BinaryOp(x, IntConstant(3), BinaryOperator.EQ))
        session.value_of(x)  # 3 after a satisfiable check
    """

    def __init__(self, config: SymirConfig | None = None, ctx: z3.Context | None = None):
        self.config = config or SymirConfig()
        self.ctx = ctx
        self.memory = Memory()
        self.translator = Z3Translator(ctx)
        self.solver = SymbolicSolver(self.config.solver.timeout_ms, ctx)

    def translate(self, expr: Expression) -> Any:
        return self.translator.translate(expr)

    def _constraints(self, exprs: tuple[Expression, ...]) -> list[z3.BoolRef]:
        for expr in exprs:
            if not expr.type.is_bool:
                raise SymbolicTypeError(
                    f"constraints must be bool, got {expr.type}", node="constraint", operands=(expr,)
                )
        return self.translator.translate_all(*exprs)

    def _axioms(self) -> list[z3.BoolRef]:
        # Separately allocated addresses never alias; other object roots only
        # do under assume_distinct_objects.
        roots = list(self.memory.roots)
        if self.config.translation.assume_distinct_objects:
            roots.extend(Variable(name, OBJECT) for name in self.translator.object_identities())
        return [self.translator.distinct_objects_axiom(roots)]

    def assume(self, *exprs: Expression) -> None:
        """Assert constraints for every later query of the session."""
        self.solver.add(*self._constraints(exprs))

    def check(self, *exprs: Expression) -> SolverResult:
        """Check the assumptions together with ``exprs``, which are not kept."""
        constraints = self._constraints(exprs) + self._axioms()
        logger = get_logger()
        self.solver.push()
        try:
            self.solver.add(*constraints)
            with logger.timer("check", category="session"):
                result = self.solver.check()
        finally:
            self.solver.pop()
        logger.count("session.checks")
        return result

    def is_satisfiable(self, *exprs: Expression) -> bool:
        return self.check(*exprs).is_sat

    def prove(self, expr: Expression) -> bool:
        """True if ``expr`` holds in every model of the assumptions.
        When it does not, the counterexample becomes the model read by
        ``value_of``.
        """
        (claim,) = self._constraints((expr,))
        self.solver.push()
        try:
            self.solver.add(*self._axioms(), z3.Not(claim))
            return self.solver.check().is_unsat
        finally:
            self.solver.pop()

    def value_of(self, expr: Expression) -> Any:
        """Value of ``expr`` in the model of the last satisfiable check.
        Int and Bool values come back as Python ints and bools, other values
        as Z3 terms. Returns None if the last check was not satisfiable.
        """
        value = self.solver.evaluate(self.translate(expr))
        if value is None:
            return None
        return python_value(value)

    def reset(self) -> None:
        """Drop all heap state, interned terms and assumptions."""
        self.memory = Memory()
        self.translator.reset()
        self.solver.reset()
        get_logger().debug("session reset", category="session")

    def __repr__(self) -> str:
        return f"AnalysisSession({self.memory!r}, {self.translator!r}, {self.solver!r})"


__all__ = ["AnalysisSession"]
