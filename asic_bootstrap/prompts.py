"""Operator prompting.

The engines never read from stdin themselves; they are handed a
:class:`Prompter`.  ``ConsolePrompter`` talks to a terminal through Rich,
``ScriptedPrompter`` replays canned answers for headless runs and tests,
and ``NonInteractivePrompter`` always takes the default.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Iterable

from rich.prompt import Confirm, Prompt

from .utils import console


class Prompter(ABC):
    """Capability to ask the operator yes/no and free-text questions."""

    interactive: bool = True

    @abstractmethod
    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask a yes/no question; an empty answer returns *default*."""

    @abstractmethod
    def ask(self, question: str, default: str = "") -> str:
        """Ask for a line of text; an empty answer returns *default*."""


class ConsolePrompter(Prompter):
    """Prompts on the terminal using ``rich.prompt``."""

    def confirm(self, question: str, default: bool = False) -> bool:
        return Confirm.ask(question, default=default, console=console)

    def ask(self, question: str, default: str = "") -> str:
        answer = Prompt.ask(question, default=default, show_default=bool(default), console=console)
        return (answer or "").strip()


class ScriptedPrompter(Prompter):
    """Replays a fixed sequence of answers.

    Each answer is consumed in order by whichever of :meth:`confirm` or
    :meth:`ask` is called next.  ``None`` or ``""`` selects the question's
    default.  Every question asked is recorded in :attr:`questions`.
    """

    def __init__(self, answers: Iterable[str | bool | None] = ()) -> None:
        self._answers: deque[str | bool | None] = deque(answers)
        self.questions: list[str] = []

    def _next(self, question: str) -> str | bool | None:
        self.questions.append(question)
        if not self._answers:
            raise LookupError(f"No scripted answer left for: {question!r}")
        return self._answers.popleft()

    def confirm(self, question: str, default: bool = False) -> bool:
        answer = self._next(question)
        if answer is None or answer == "":
            return default
        if isinstance(answer, bool):
            return answer
        return answer.strip().lower() in ("y", "yes")

    def ask(self, question: str, default: str = "") -> str:
        answer = self._next(question)
        if answer is None or answer == "":
            return default
        return str(answer).strip()

    @property
    def remaining(self) -> int:
        return len(self._answers)


class NonInteractivePrompter(Prompter):
    """Never blocks: returns defaults, or *assume_yes* for confirmations."""

    interactive = False

    def __init__(self, assume_yes: bool | None = None) -> None:
        self.assume_yes = assume_yes

    def confirm(self, question: str, default: bool = False) -> bool:
        if self.assume_yes is None:
            return default
        return self.assume_yes

    def ask(self, question: str, default: str = "") -> str:
        return default
