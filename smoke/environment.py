"""Scope stack and value storage for the Smoke interpreter.

Values live in a :class:`ValueArena`, a flat list of slots addressed by
integer index. A :class:`Frame` maps names to slot indices, and the
:class:`Environment` is an ordered stack of frames, innermost last.
Lookups hand out :class:`ValueHandle` objects that address the same slot
the frame does, so a binding and a looked-up handle observe one cell.

Because frames only hold indices and function values never refer to a
frame, no reference cycle can form; popping a frame releases its slots.
"""

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .errors import InternalError, ReferenceUndefinedError
from .values import ScopeVal, Value


class ValueArena:
    """Slot storage for every value currently bound to a name.

    Each slot has a generation that is bumped whenever the slot is
    released. A handle remembers the generation it was taken at, so it can
    tell its binding apart from a later one that reuses the slot.
    """

    def __init__(self):
        self.slots: List[Optional[Value]] = []
        self.generations: List[int] = []
        self.free: List[int] = []

    def allocate(self, value: Value) -> int:
        if self.free:
            index = self.free.pop()
            self.slots[index] = value
        else:
            index = len(self.slots)
            self.slots.append(value)
            self.generations.append(0)
        return index

    def check(self, index: int, generation: Optional[int], access: str):
        if self.slots[index] is None:
            raise InternalError(f"{access} of released value slot {index}")
        if generation is not None and generation != self.generations[index]:
            raise InternalError(f"{access} through a stale handle to value slot {index}")

    def load(self, index: int, generation: Optional[int] = None) -> Value:
        self.check(index, generation, 'read')
        return self.slots[index]

    def store(self, index: int, value: Value, generation: Optional[int] = None):
        self.check(index, generation, 'write')
        self.slots[index] = value

    def release(self, index: int):
        self.slots[index] = None
        self.generations[index] += 1
        self.free.append(index)

    @property
    def live(self) -> int:
        return len(self.slots) - len(self.free)


class ValueHandle:
    """A reference to one arena slot, valid until that slot is released."""

    __slots__ = ('arena', 'index', 'generation')

    def __init__(self, arena: ValueArena, index: int):
        self.arena = arena
        self.index = index
        self.generation = arena.generations[index]

    def get(self) -> Value:
        return self.arena.load(self.index, self.generation)

    def set(self, value: Value):
        self.arena.store(self.index, value, self.generation)

    def __repr__(self) -> str:
        return f"<ValueHandle #{self.index}.{self.generation}>"


class Frame:
    """One lexical frame: a mapping of names to arena slots."""

    def __init__(self):
        self.bindings: Dict[str, int] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.bindings


class Environment:
    """The stack of active frames, shared by every evaluation step.

    The stack always holds at least the global frame. Declarations go into
    the top frame; lookups search from the top frame down.
    """

    def __init__(self, arena: Optional[ValueArena] = None):
        self.arena = arena if arena is not None else ValueArena()
        self.frames: List[Frame] = [Frame()]

    @property
    def depth(self) -> int:
        return len(self.frames)

    @property
    def top(self) -> Frame:
        return self.frames[-1]

    def declare(self, name: str, value: Value) -> ValueHandle:
        """Bind ``name`` in the top frame, replacing any binding it already has there."""
        frame = self.top
        if name in frame.bindings:
            self.arena.release(frame.bindings[name])
        index = self.arena.allocate(value)
        frame.bindings[name] = index
        return ValueHandle(self.arena, index)

    def lookup(self, name: str) -> ValueHandle:
        for frame in reversed(self.frames):
            if name in frame.bindings:
                return ValueHandle(self.arena, frame.bindings[name])
        raise ReferenceUndefinedError(name)

    def get(self, name: str) -> Value:
        return self.lookup(name).get()

    def push(self, bindings: Optional[Dict[str, Value]] = None) -> Frame:
        frame = Frame()
        self.frames.append(frame)
        if bindings:
            for name, value in bindings.items():
                self.declare(name, value)
        return frame

    def pop(self) -> ScopeVal:
        """Remove the top frame and return it demoted to a plain Scope value."""
        if len(self.frames) == 1:
            raise InternalError('attempted to pop the global scope')
        frame = self.frames.pop()
        snapshot = {name: self.arena.load(index) for name, index in frame.bindings.items()}
        for index in frame.bindings.values():
            self.arena.release(index)
        return ScopeVal(snapshot)

    @contextmanager
    def scope(self, bindings: Optional[Dict[str, Value]] = None) -> Iterator[Frame]:
        """Push a frame for the duration of a ``with`` block, popping it on any exit."""
        frame = self.push(bindings)
        depth = self.depth
        try:
            yield frame
        finally:
            self.unwind(depth - 1)

    def unwind(self, depth: int):
        """Pop frames until only ``depth`` remain."""
        while len(self.frames) > max(depth, 1):
            self.pop()

    def snapshot(self) -> ScopeVal:
        """The global frame as a Scope value, without popping it."""
        frame = self.frames[0]
        return ScopeVal({name: self.arena.load(index) for name, index in frame.bindings.items()})
