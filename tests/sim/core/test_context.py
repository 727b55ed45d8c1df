"""Tests for EffectContext copy-on-write updates and role resolution."""

import pytest
from pydantic import ValidationError

from effect_engine.errors import ResolutionError
from effect_engine.ir.roles import Faction, Who
from effect_engine.sim.core.battle_state import BattleModel
from effect_engine.sim.core.context import EffectContext, resolve_who
from effect_engine.sim.core.entities import AttachedStatus, Unit


def _make_model() -> BattleModel:
    model = BattleModel()
    model.add_unit(Unit(id=1, name="squire", faction=Faction.PLAYER, hp=10, max_hp=10))
    model.add_unit(Unit(
        id=2,
        name="archer",
        faction=Faction.ENEMY,
        hp=6,
        max_hp=6,
        statuses=[AttachedStatus(id=5, name="poison", caster=1)],
    ))
    return model


class TestContextUpdates:
    def test_rebind_leaves_parent_untouched(self):
        parent = EffectContext(owner=1, caster=1, target=2, vars={"x": 1})
        child = parent.rebind(Who.TARGET, 3)
        assert child.target == 3
        assert parent.target == 2
        assert child.owner == 1

    def test_sibling_var_bags_are_separate(self):
        parent = EffectContext(owner=1, vars={"x": 1})
        left = parent.rebind(Who.TARGET, 2)
        right = parent.rebind(Who.TARGET, 3)
        left.vars["x"] = 99
        assert right.vars["x"] == 1
        assert parent.vars["x"] == 1

    def test_vars_not_shared_with_caller(self):
        values = {"x": 1}
        ctx = EffectContext(vars=values)
        values["x"] = 2
        child = ctx.with_vars(y=3)
        assert ctx.vars == {"x": 1}
        assert child.vars is not ctx.vars

    def test_with_vars_overlays(self):
        ctx = EffectContext(vars={"x": 1, "y": 2}).with_vars(y=5, z=6)
        assert ctx.vars == {"x": 1, "y": 5, "z": 6}

    def test_frozen(self):
        ctx = EffectContext(owner=1)
        with pytest.raises(ValidationError):
            ctx.owner = 2

    def test_status_caster_cannot_be_rebound(self):
        with pytest.raises(ValueError):
            EffectContext().rebind(Who.STATUS_CASTER, 1)

    def test_for_unit(self):
        ctx = EffectContext.for_unit(4)
        assert (ctx.owner, ctx.caster, ctx.target) == (4, 4, 4)
        assert EffectContext.for_unit(4, target=6).target == 6

    def test_with_status_and_queue(self):
        ctx = EffectContext(owner=1).with_status(5, "#fff").with_queue("unit-1")
        assert ctx.status_id == 5
        assert ctx.color == "#fff"
        assert ctx.queue_id == "unit-1"


class TestResolveWho:
    def test_direct_roles(self):
        model = _make_model()
        ctx = EffectContext(owner=1, caster=2, target=2)
        assert resolve_who(Who.OWNER, ctx, model) == 1
        assert resolve_who(Who.CASTER, ctx, model) == 2

    def test_unbound_role_raises(self):
        with pytest.raises(ResolutionError):
            resolve_who(Who.TARGET, EffectContext(owner=1), _make_model())

    def test_removed_unit_raises(self):
        model = _make_model()
        model.remove_unit(2)
        with pytest.raises(ResolutionError):
            resolve_who(Who.TARGET, EffectContext(owner=1, target=2), model)

    def test_status_caster(self):
        model = _make_model()
        ctx = EffectContext(owner=2, status_id=5)
        assert resolve_who(Who.STATUS_CASTER, ctx, model) == 1

    def test_status_caster_without_status_raises(self):
        with pytest.raises(ResolutionError):
            resolve_who(Who.STATUS_CASTER, EffectContext(owner=2), _make_model())
