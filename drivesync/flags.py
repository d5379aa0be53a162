"""Per-command boolean flag schemas and their pre-dispatch normalisation.

Click only understands ``-r`` / ``--no-recursive`` style switches. Users
also write ``-r=false``, ``--hidden=true`` or ``-no-prompt``; these are
rewritten into click syntax before the command line is handed to typer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .errors import InvalidFlag

_TRUE_LITERALS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_LITERALS = {"0", "f", "F", "FALSE", "false", "False"}

_FLAG_TOKEN = re.compile(r"^--?(?P<name>[A-Za-z][A-Za-z0-9_-]*)(?:=(?P<value>.*))?$")


@dataclass(frozen=True)
class BoolFlag:
    """A boolean switch accepted by a command."""

    name: str
    default: bool
    enable: str
    disable: Optional[str] = None

    def token_for(self, value: bool) -> Optional[str]:
        """Return the click token expressing ``value``, or ``None`` when omitting it suffices."""

        if value:
            return self.enable
        if self.disable is None:
            if self.default:
                raise InvalidFlag(f"flag -{self.name} cannot be disabled")
            return None
        return self.disable


def parse_bool(name: str, literal: str) -> bool:
    if literal in _TRUE_LITERALS:
        return True
    if literal in _FALSE_LITERALS:
        return False
    raise InvalidFlag(f'invalid boolean value "{literal}" for -{name}')


def parse_flags(flags: Sequence[BoolFlag], tokens: Sequence[str]) -> List[str]:
    """Rewrite explicit boolean assignments in ``tokens`` for click."""

    by_name: Dict[str, BoolFlag] = {flag.name: flag for flag in flags}
    result: List[str] = []
    for index, token in enumerate(tokens):
        if token == "--":
            result.extend(tokens[index:])
            break

        match = _FLAG_TOKEN.match(token)
        flag = by_name.get(match.group("name")) if match else None
        if flag is None:
            result.append(token)
            continue

        literal = match.group("value")
        value = True if literal is None else parse_bool(flag.name, literal)
        rewritten = flag.token_for(value)
        if rewritten is not None:
            result.append(rewritten)
    return result


def normalize_invocation(tokens: Sequence[str], schemas: Dict[str, Sequence[BoolFlag]]) -> List[str]:
    """Apply the schema of the invoked command to the tokens that follow it."""

    for index, token in enumerate(tokens):
        if token in schemas:
            return [*tokens[: index + 1], *parse_flags(schemas[token], tokens[index + 1 :])]
    return list(tokens)
