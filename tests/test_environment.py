import pytest

from smoke.environment import Environment, ValueArena, ValueHandle
from smoke.errors import InternalError, ReferenceUndefinedError
from smoke.values import IntVal, ScopeVal, StrVal


def test_declare_and_lookup():
    env = Environment()
    env.declare('x', IntVal(1))
    assert env.get('x') == IntVal(1)
    with pytest.raises(ReferenceUndefinedError):
        env.lookup('y')


def test_handles_alias_the_binding():
    env = Environment()
    env.declare('x', IntVal(1))
    handle = env.lookup('x')
    handle.set(IntVal(5))
    assert env.get('x') == IntVal(5)
    assert env.lookup('x').get() == IntVal(5)


def test_innermost_binding_wins():
    env = Environment()
    env.declare('x', IntVal(1))
    env.push({'x': IntVal(2)})
    assert env.get('x') == IntVal(2)
    env.pop()
    assert env.get('x') == IntVal(1)


def test_pop_demotes_frame_to_scope_value():
    env = Environment()
    env.push()
    env.declare('a', IntVal(1))
    env.declare('b', StrVal('two'))
    scope = env.pop()
    assert scope == ScopeVal({'a': IntVal(1), 'b': StrVal('two')})
    assert env.depth == 1
    with pytest.raises(ReferenceUndefinedError):
        env.lookup('a')


def test_pop_releases_slots_for_reuse():
    env = Environment()
    env.declare('g', IntVal(0))
    env.push({'a': IntVal(1), 'b': IntVal(2)})
    assert env.arena.live == 3
    env.pop()
    assert env.arena.live == 1
    env.declare('c', IntVal(3))
    # a released slot is reused rather than growing the arena
    assert len(env.arena.slots) == 3


def test_redeclaring_releases_the_old_slot():
    env = Environment()
    env.declare('x', IntVal(1))
    env.declare('x', IntVal(2))
    assert env.arena.live == 1
    assert env.get('x') == IntVal(2)


def test_global_frame_cannot_be_popped():
    env = Environment()
    with pytest.raises(InternalError):
        env.pop()


def test_scope_context_manager_pops_on_error():
    env = Environment()
    with pytest.raises(ValueError):
        with env.scope({'a': IntVal(1)}):
            assert env.depth == 2
            env.push()
            raise ValueError('boom')
    assert env.depth == 1
    with pytest.raises(ReferenceUndefinedError):
        env.lookup('a')


def test_unwind_never_removes_the_global_frame():
    env = Environment()
    env.push()
    env.push()
    env.unwind(0)
    assert env.depth == 1


def test_snapshot_of_global_frame():
    env = Environment()
    env.declare('x', IntVal(1))
    env.push({'y': IntVal(2)})
    assert env.snapshot() == ScopeVal({'x': IntVal(1)})
    assert env.depth == 2


def test_released_slot_access_is_an_internal_error():
    arena = ValueArena()
    handle = ValueHandle(arena, arena.allocate(IntVal(1)))
    arena.release(handle.index)
    with pytest.raises(InternalError):
        handle.get()
    with pytest.raises(InternalError):
        handle.set(IntVal(2))


def test_handle_does_not_follow_a_reused_slot():
    env = Environment()
    env.push()
    env.declare('x', IntVal(1))
    handle = env.lookup('x')
    env.pop()
    env.declare('y', IntVal(99))
    # y took over the slot that x was released from
    assert env.lookup('y').index == handle.index
    with pytest.raises(InternalError):
        handle.get()
    with pytest.raises(InternalError):
        handle.set(IntVal(2))
    assert env.get('y') == IntVal(99)


def test_redeclaring_invalidates_old_handles():
    env = Environment()
    old = env.declare('x', IntVal(1))
    env.declare('x', IntVal(2))
    with pytest.raises(InternalError):
        old.get()
    assert env.lookup('x').get() == IntVal(2)
