"""Tests for analysis sessions."""

import pytest
import z3

from symir.config import SymirConfig
from symir.core.errors import SymbolicTypeError
from symir.core.expressions import BinaryOp, BinaryOperator, IntConstant, Variable
from symir.core.types import INT, OBJECT
from symir.session import AnalysisSession

x = Variable("x", INT)
y = Variable("y", INT)


def binop(left, operator, right):
    return BinaryOp(left, right, operator)


class TestQueries:
    def test_assume_and_check(self, session):
        session.assume(binop(binop(x, BinaryOperator.ADD, y), BinaryOperator.GT, IntConstant(5)))
        assert not session.is_satisfiable(
            binop(x, BinaryOperator.EQ, IntConstant(3)), binop(y, BinaryOperator.EQ, IntConstant(1))
        )
        assert session.is_satisfiable(
            binop(x, BinaryOperator.EQ, IntConstant(3)), binop(y, BinaryOperator.EQ, IntConstant(3))
        )

    def test_check_does_not_keep_constraints(self, session):
        assert not session.is_satisfiable(
            binop(x, BinaryOperator.GT, IntConstant(0)), binop(x, BinaryOperator.LT, IntConstant(0))
        )
        assert session.is_satisfiable(binop(x, BinaryOperator.LT, IntConstant(0)))

    def test_value_of(self, session):
        session.assume(binop(x, BinaryOperator.EQ, IntConstant(3)))
        assert session.value_of(x) is None
        result = session.check()
        assert result.is_sat
        assert session.value_of(x) == 3
        assert session.value_of(binop(x, BinaryOperator.GT, IntConstant(1))) is True

    def test_prove(self, session):
        session.assume(binop(x, BinaryOperator.GT, IntConstant(10)))
        assert session.prove(binop(x, BinaryOperator.GT, IntConstant(5)))
        assert not session.prove(binop(x, BinaryOperator.GT, IntConstant(50)))
        assert session.value_of(x) <= 50

    def test_constraints_must_be_bool(self, session):
        with pytest.raises(SymbolicTypeError):
            session.assume(x)

    def test_translate_shares_the_session_cache(self, session):
        assert session.translate(x) is session.translator.variables["x"]


class TestHeapQueries:
    def test_field_write_is_visible(self, session):
        person = session.memory.allocate(OBJECT, tag="Person")
        session.memory.assign_field(person, 0, IntConstant(30))
        age = session.memory.get_field(person, 0, INT)
        assert session.prove(binop(age, BinaryOperator.EQ, IntConstant(30)))

    def test_allocated_objects_never_alias(self, session):
        p = session.memory.allocate(OBJECT, tag="Person")
        q = session.memory.allocate(OBJECT, tag="Person")
        session.memory.assign_field(p, 0, IntConstant(1))
        session.memory.assign_field(q, 0, IntConstant(2))
        same = binop(p.current_expr, BinaryOperator.EQ, q.current_expr)
        assert not session.is_satisfiable(same)
        assert session.prove(binop(p.current_expr, BinaryOperator.NE, q.current_expr))

    def test_aliases_stay_equal(self, session):
        p = session.memory.allocate(OBJECT, tag="Person")
        alias = session.memory.alias(p)
        session.memory.assign_field(alias, 0, IntConstant(7))
        assert session.prove(binop(p.current_expr, BinaryOperator.EQ, alias.current_expr))

    def test_distinct_free_roots_when_configured(self):
        config = SymirConfig()
        a, b = Variable("a", OBJECT), Variable("b", OBJECT)
        for assume_distinct in (False, True):
            config.translation.assume_distinct_objects = assume_distinct
            session = AnalysisSession(config)
            session.memory.allocate(OBJECT, tag="Person")
            same = binop(a, BinaryOperator.EQ, b)
            assert session.is_satisfiable(same) is not assume_distinct

    def test_read_modify_write_chain(self, session):
        person = session.memory.allocate(OBJECT, tag="Person")
        session.memory.assign_field(person, 0, IntConstant(0))
        for _ in range(50):
            age = session.memory.get_field(person, 0, INT)
            session.memory.assign_field(person, 0, binop(age, BinaryOperator.ADD, IntConstant(1)))
        final = session.memory.get_field(person, 0, INT)
        assert session.prove(binop(final, BinaryOperator.EQ, IntConstant(50)))


class TestLifecycle:
    def test_reset(self, session):
        session.memory.allocate(OBJECT, tag="Person")
        session.assume(binop(x, BinaryOperator.EQ, IntConstant(1)))
        session.reset()
        assert session.memory.object_count == 0
        assert len(session.translator.variables) == 0
        assert session.solver.assertions() == []
        assert session.is_satisfiable(binop(Variable("x", INT), BinaryOperator.EQ, IntConstant(2)))

    def test_solver_uses_configured_timeout(self):
        config = SymirConfig()
        config.solver.timeout_ms = 1234
        assert AnalysisSession(config).solver.timeout_ms == 1234

    def test_private_context(self):
        ctx = z3.Context()
        session = AnalysisSession(ctx=ctx)
        assert session.is_satisfiable(binop(x, BinaryOperator.GE, IntConstant(0)))
        assert session.translate(x).ctx == ctx

    def test_checks_are_counted(self, session, quiet_logger):
        session.check()
        session.check()
        assert quiet_logger.get_count("session.checks") == 2
