"""Solver helpers for assertions in tests."""

import z3


def proves(claim: z3.BoolRef) -> bool:
    """True if the formula holds in every model."""
    solver = z3.Solver(ctx=claim.ctx)
    solver.add(z3.Not(claim))
    return solver.check() == z3.unsat


def satisfiable(*constraints: z3.BoolRef) -> bool:
    solver = z3.Solver(ctx=constraints[0].ctx)
    solver.add(*constraints)
    return solver.check() == z3.sat
