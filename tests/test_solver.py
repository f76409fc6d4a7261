"""Tests for the Z3 solver wrapper."""

import z3

from symir.core.solver import SolverResult, SymbolicSolver, is_satisfiable, prove, python_value


class TestSymbolicSolver:
    def test_sat_with_model(self):
        solver = SymbolicSolver()
        n = z3.Int("n")
        solver.add(n > 3, n < 5)
        result = solver.check()
        assert result.is_sat and result.status == "sat"
        assert result
        assert result.model.eval(n).as_long() == 4
        assert solver.evaluate(n).as_long() == 4

    def test_unsat(self):
        solver = SymbolicSolver()
        n = z3.Int("n")
        solver.add(n > 3, n < 3)
        result = solver.check()
        assert result.is_unsat and result.status == "unsat"
        assert not result
        assert solver.evaluate(n) is None

    def test_push_pop(self):
        solver = SymbolicSolver()
        n = z3.Int("n")
        solver.add(n > 0)
        solver.push()
        solver.add(n < 0)
        assert solver.check().is_unsat
        solver.pop()
        assert solver.check().is_sat

    def test_is_sat_leaves_assertions_alone(self):
        solver = SymbolicSolver()
        n = z3.Int("n")
        solver.add(n > 0)
        assert not solver.is_sat([n < 0])
        assert solver.is_sat([n > 10])
        assert len(solver.assertions()) == 1

    def test_check_with_assumptions(self):
        solver = SymbolicSolver()
        p = z3.Bool("p")
        solver.add(z3.Not(p))
        assert solver.check(p).is_unsat
        assert solver.check().is_sat

    def test_implies(self):
        solver = SymbolicSolver()
        n = z3.Int("n")
        assert solver.implies(n > 5, n > 3)
        assert not solver.implies(n > 3, n > 5)

    def test_stats_and_reset(self):
        solver = SymbolicSolver(timeout_ms=500)
        n = z3.Int("n")
        solver.add(n == 1)
        solver.check()
        solver.add(n == 2)
        solver.check()
        assert solver.get_stats() == {"queries": 2, "sat": 1, "unsat": 1, "unknown": 0}
        solver.reset()
        assert solver.assertions() == []
        assert solver.model is None

    def test_private_context(self):
        ctx = z3.Context()
        solver = SymbolicSolver(ctx=ctx)
        solver.add(z3.Int("n", ctx) == 2)
        assert solver.check().is_sat

    def test_unknown_result(self):
        result = SolverResult.unknown("timeout")
        assert result.status == "unknown"
        assert result.reason == "timeout"
        assert not result


class TestHelpers:
    def test_is_satisfiable(self):
        n = z3.Int("n")
        assert is_satisfiable([n > 1])
        assert not is_satisfiable([n > 1, n < 1])
        assert is_satisfiable([])

    def test_prove(self):
        n = z3.Int("n")
        assert prove(z3.Implies(n > 1, n > 0))
        assert not prove(n > 0)

    def test_python_value(self):
        assert python_value(z3.IntVal(-4)) == -4
        assert python_value(z3.BoolVal(True)) is True
        assert python_value(z3.BoolVal(False)) is False
        term = z3.Int("n")
        assert python_value(term) is term
