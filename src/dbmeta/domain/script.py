"""Script splitting with ``SET TERM`` support.

A script is a sequence of statements ended by the current terminator
(``;`` by default). ``SET TERM ^ ;`` switches the terminator to ``^`` so
that procedure bodies, which contain ``;`` themselves, travel as one
statement; ``SET TERM ; ^`` switches back.

Splitting is a fold of :func:`step` over the script lines: every step
takes the current :class:`SplitState` and one line and returns the next
state plus the statement the line completed, if any.

Directive detection matches the two directive spellings above by
substring, the same way the export side writes them. Other phrasings
(``SET TERM !! ;``, a directive split across lines) are not recognised.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace

DEFAULT_TERMINATOR = ";"
ALTERNATE_TERMINATOR = "^"
DIRECTIVE = "SET TERM"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def term_directive(new: str, current: str) -> str:
    """Return the directive switching from *current* to *new* terminator."""
    return f"{DIRECTIVE} {new} {current}"


@dataclass(frozen=True)
class SplitState:
    """Splitter state between two lines.

    Attributes:
        terminator: Statement terminator currently in force.
        buffer: Raw text of the statement being accumulated.
    """

    terminator: str = DEFAULT_TERMINATOR
    buffer: str = ""

    @property
    def pending(self) -> str:
        """Unterminated text left in the buffer (stripped)."""
        return self.buffer.strip()


def iter_lines(script: str) -> Iterator[str]:
    """Yield the lines of *script* without their line breaks.

    A trailing line break does not produce a final empty line.
    """
    lines = _LINE_BREAK.split(script)
    if lines and lines[-1] == "":
        lines.pop()
    yield from lines


def is_directive(line: str) -> bool:
    return line.strip().upper().startswith(DIRECTIVE)


def directive_terminator(line: str, current: str) -> str:
    """Return the terminator selected by a ``SET TERM`` directive line."""
    text = line.strip()
    if ALTERNATE_TERMINATOR in text and DEFAULT_TERMINATOR not in text:
        return ALTERNATE_TERMINATOR
    if f"{ALTERNATE_TERMINATOR} {DEFAULT_TERMINATOR}" in text:
        return ALTERNATE_TERMINATOR
    if f"{DEFAULT_TERMINATOR} {ALTERNATE_TERMINATOR}" in text:
        return DEFAULT_TERMINATOR
    return current


def step(state: SplitState, line: str) -> tuple[SplitState, str | None]:
    """Feed one line into the splitter.

    Returns the new state and the completed statement, if this line
    finished one.
    """
    if is_directive(line):
        return replace(state, terminator=directive_terminator(line, state.terminator)), None

    buffer = f"{state.buffer}{line}\n"
    if not buffer.rstrip().endswith(state.terminator):
        return replace(state, buffer=buffer), None

    text = buffer.strip()
    statement = text[: text.rfind(state.terminator)].strip()
    return replace(state, buffer=""), statement or None


def fold_lines(lines: Iterable[str], state: SplitState | None = None) -> tuple[SplitState, list[str]]:
    """Run :func:`step` over *lines*, collecting the completed statements."""
    state = state or SplitState()
    statements: list[str] = []
    for line in lines:
        state, statement = step(state, line)
        if statement is not None:
            statements.append(statement)
    return state, statements


def split_script(script: str) -> list[str]:
    """Split *script* into executable statements, terminators removed.

    Blank statements are dropped. Text after the last terminator is
    discarded; use :func:`fold_lines` to inspect it.
    """
    _state, statements = fold_lines(iter_lines(script))
    return statements
