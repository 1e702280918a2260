"""Suspend/resume driver that feeds key tokens into a grammar one at a time.

A grammar is a generator function written as straight-line recursive
descent. Whenever it needs another key it evaluates ``tok = yield None``;
it may also ``yield`` an intermediate command (incremental search) before
pulling the next key, and it finishes by ``return``-ing the completed
command. ``Coroutine`` owns both the generator and the ``ParseState`` it
writes its echo/count/register into, so nothing is shared between callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generator, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class ParseState:
    """Mutable state a grammar accumulates while a command is typed."""

    echo: List[str] = field(default_factory=list)
    register: Optional[str] = None

    @property
    def display(self) -> str:
        return "".join(self.echo)

    def push(self, token: str) -> None:
        self.echo.append(token)

    def pop(self) -> None:
        if self.echo:
            self.echo.pop()


Grammar = Callable[[ParseState], Generator[Optional[T], str, T]]


class ResumeKind(Enum):
    PENDING = "pending"
    YIELD = "yield"
    RETURN = "return"


@dataclass(frozen=True, slots=True)
class Resume(Generic[T]):
    kind: ResumeKind
    value: Optional[T] = None

    @property
    def pending(self) -> bool:
        return self.kind is ResumeKind.PENDING

    @property
    def finished(self) -> bool:
        return self.kind is ResumeKind.RETURN


class Coroutine(Generic[T]):
    """Drives one parse of ``grammar``; replace the instance to start over."""

    def __init__(self, grammar: Grammar[T]) -> None:
        self.grammar = grammar
        self.state = ParseState()
        self._gen = grammar(self.state)
        self._started = False
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    @property
    def display(self) -> str:
        return self.state.display

    def resume(self, token: str) -> Resume[T]:
        if self._done:
            raise RuntimeError("Coroutine already returned; install a fresh one")
        if not self._started:
            self._started = True
            next(self._gen)
        try:
            value = self._gen.send(token)
        except StopIteration as stop:
            self._done = True
            return Resume(ResumeKind.RETURN, stop.value)
        if value is None:
            return Resume(ResumeKind.PENDING)
        return Resume(ResumeKind.YIELD, value)

    def resume_all(self, tokens: Iterable[str]) -> Resume[T]:
        """Feed ``tokens`` in order and report the last outcome.

        Feeding stops as soon as the grammar returns; remaining tokens are
        not consumed.
        """

        outcome: Resume[T] = Resume(ResumeKind.PENDING)
        for token in tokens:
            outcome = self.resume(token)
            if outcome.finished:
                break
        return outcome


__all__ = ["Coroutine", "Grammar", "ParseState", "Resume", "ResumeKind"]
