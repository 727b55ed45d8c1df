"""Tests for expression evaluation."""

import pytest

from effect_engine.errors import EvaluationError, ResolutionError
from effect_engine.ir.expressions import (
    ArithmeticOp,
    Binary,
    Const,
    GlobalVar,
    Stat,
    Str,
    UnitStat,
    Var,
    Vec,
)
from effect_engine.ir.roles import Faction, Who
from effect_engine.sim.core.battle_state import BattleModel
from effect_engine.sim.core.context import EffectContext
from effect_engine.sim.core.entities import AttachedStatus, Unit
from effect_engine.sim.mechanics.expressions import (
    add_values,
    evaluate,
    evaluate_int,
    evaluate_or,
    format_value,
)


def _make_model() -> BattleModel:
    model = BattleModel(global_vars={"round": 3})
    model.add_unit(Unit(
        id=1,
        name="squire",
        faction=Faction.PLAYER,
        hp=8,
        max_hp=10,
        attack=2,
        vars={"x": "owner", "only_owner": 4},
        statuses=[AttachedStatus(id=9, name="shield", vars={"x": "status", "block": 3})],
    ))
    return model


def _binary(op: ArithmeticOp, left, right) -> Binary:
    return Binary(op=op, left=left, right=right)


class TestLiterals:
    def test_const_str_vec(self):
        model, ctx = _make_model(), EffectContext()
        assert evaluate(Const(value=2.5), ctx, model) == 2.5
        assert evaluate(Str(value="hi"), ctx, model) == "hi"
        assert evaluate(Vec(x=1, y=2), ctx, model) == (1.0, 2.0)


class TestVarLookup:
    def test_context_overlay_wins(self):
        ctx = EffectContext(owner=1, status_id=9, vars={"x": "context"})
        assert evaluate(Var(name="x"), ctx, _make_model()) == "context"

    def test_status_bag_before_owner(self):
        ctx = EffectContext(owner=1, status_id=9)
        assert evaluate(Var(name="x"), ctx, _make_model()) == "status"

    def test_owner_bag(self):
        ctx = EffectContext(owner=1)
        assert evaluate(Var(name="x"), ctx, _make_model()) == "owner"
        assert evaluate(Var(name="only_owner"), ctx.with_status(9), _make_model()) == 4

    def test_default(self):
        assert evaluate(Var(name="missing", default=1), EffectContext(owner=1), _make_model()) == 1

    def test_unbound_raises(self):
        with pytest.raises(EvaluationError):
            evaluate(Var(name="missing"), EffectContext(owner=1), _make_model())

    def test_global_var(self):
        model = _make_model()
        assert evaluate(GlobalVar(name="round"), EffectContext(), model) == 3
        assert evaluate(GlobalVar(name="nope", default=0), EffectContext(), model) == 0
        with pytest.raises(EvaluationError):
            evaluate(GlobalVar(name="nope"), EffectContext(), model)


class TestStat:
    def test_reads_bound_unit(self):
        ctx = EffectContext(owner=1)
        assert evaluate(Stat(who=Who.OWNER, stat=UnitStat.ATTACK), ctx, _make_model()) == 2
        assert evaluate(Stat(who=Who.OWNER, stat=UnitStat.MAX_HP), ctx, _make_model()) == 10

    def test_unbound_role_raises(self):
        with pytest.raises(ResolutionError):
            evaluate(Stat(who=Who.TARGET, stat=UnitStat.HP), EffectContext(owner=1), _make_model())


class TestBinary:
    @pytest.mark.parametrize(
        "op, expected",
        [
            (ArithmeticOp.ADD, 8.0),
            (ArithmeticOp.SUB, 4.0),
            (ArithmeticOp.MUL, 12.0),
            (ArithmeticOp.DIV, 3.0),
            (ArithmeticOp.MIN, 2.0),
            (ArithmeticOp.MAX, 6.0),
        ],
    )
    def test_scalar_ops(self, op, expected):
        expr = _binary(op, Const(value=6), Const(value=2))
        assert evaluate(expr, EffectContext(), BattleModel()) == expected

    def test_division_by_zero(self):
        expr = _binary(ArithmeticOp.DIV, Const(value=1), Const(value=0))
        with pytest.raises(EvaluationError):
            evaluate(expr, EffectContext(), BattleModel())

    def test_vector_scalar_broadcast(self):
        expr = _binary(ArithmeticOp.MUL, Vec(x=1, y=2), Const(value=3))
        assert evaluate(expr, EffectContext(), BattleModel()) == (3.0, 6.0)

    def test_vector_add(self):
        expr = _binary(ArithmeticOp.ADD, Vec(x=1, y=2), Vec(x=10, y=20))
        assert evaluate(expr, EffectContext(), BattleModel()) == (11.0, 22.0)

    def test_string_concat(self):
        expr = _binary(ArithmeticOp.ADD, Str(value="Bo"), Str(value="om"))
        assert evaluate(expr, EffectContext(), BattleModel()) == "Boom"

    def test_string_arithmetic_rejected(self):
        expr = _binary(ArithmeticOp.MUL, Str(value="a"), Const(value=2))
        with pytest.raises(EvaluationError):
            evaluate(expr, EffectContext(), BattleModel())


class TestHelpers:
    def test_evaluate_int_rounds(self):
        assert evaluate_int(Const(value=2.6), EffectContext(), BattleModel()) == 3
        assert evaluate_int(Const(value=2.4), EffectContext(), BattleModel()) == 2

    def test_evaluate_int_rejects_strings(self):
        with pytest.raises(EvaluationError):
            evaluate_int(Str(value="x"), EffectContext(), BattleModel())

    def test_evaluate_or_default(self):
        assert evaluate_or(Var(name="missing"), EffectContext(), BattleModel(), 7) == 7

    def test_add_values(self):
        assert add_values(2, 3) == 5.0
        assert add_values("a", "b") == "ab"
        assert add_values((1.0, 1.0), 1) == (2.0, 2.0)

    def test_format_value(self):
        assert format_value(3.0) == "3"
        assert format_value(2.5) == "2.5"
        assert format_value("Boom!") == "Boom!"
        assert format_value((1.0, 2.5)) == "(1, 2.5)"
