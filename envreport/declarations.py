"""
EnvReport declaration tracker.

Records, for every declared variable name, the set of values ever bound
to it, and follows identifier chains back to a literal:

    DB_ENV = "DATABASE_URL"
    ACTIVE = DB_ENV          # ACTIVE -> DB_ENV -> "DATABASE_URL"

Names only enter the map through `register_declaration`. Assignments to
names that were never declared are ignored.
"""

import logging
from typing import Optional

from envreport.errors import IndirectionCycleError
from envreport.nodes import Identifier, Literal, SyntaxValue, Unsupported

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


class DeclarationTracker:
    """Name → insertion-ordered set of `Literal`/`Identifier` values.

    A registered name stays registered for the lifetime of the tracker,
    even with an empty value set.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        self.max_depth = max_depth
        self._decls: dict[str, dict[SyntaxValue, None]] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._decls

    def __len__(self) -> int:
        return len(self._decls)

    def names(self) -> list[str]:
        return list(self._decls)

    def values(self, name: str) -> list[SyntaxValue]:
        """Values recorded for `name`, oldest first."""
        return list(self._decls.get(name, ()))

    def register_declaration(self, name: str, initializer: Optional[SyntaxValue] = None) -> None:
        """Register a declaration of `name`, optionally with its initializer.

        A declaration without an initializer (`x: str`) registers the name
        with no values. An initializer that is neither a literal nor a name
        is replaced by a placeholder literal describing the problem; that
        text shows up in the final output.
        """
        values = self._decls.setdefault(name, {})
        if initializer is None:
            return

        match initializer:
            case Literal() | Identifier():
                values[initializer] = None
            case Unsupported(kind=kind, lineno=lineno, col_offset=col_offset):
                logger.debug("Declaration of %s has unsupported initializer %s", name, kind)
                placeholder = (
                    f"expected identifier ({name}) value to be either "
                    f"Constant or Name, but got {kind}"
                )
                values[Literal(text=placeholder, raw=placeholder, lineno=lineno, col_offset=col_offset)] = None

    def record_assignment(self, name: str, value: SyntaxValue) -> None:
        """Record a later assignment to an already-declared `name`."""
        if name not in self._decls:
            return

        match value:
            case Literal():
                self._decls[name][value] = None
            case Identifier():
                resolved = self.resolve_identifier(value)
                if resolved is not None:
                    self._decls[name][resolved] = None
            case Unsupported():
                pass

    def resolve_identifier(self, ident: Identifier) -> Optional[Literal]:
        """Follow `ident` through the map to a literal.

        Only the most recently recorded value of each name is followed.

        Returns:
            The literal at the end of the chain, or None when a name on the
            chain is unknown or has no values.

        Raises:
            IndirectionCycleError: the chain revisits a name or is longer
                than `max_depth` hops.
        """
        chain = [ident.name]
        name = ident.name
        while True:
            values = self._decls.get(name)
            if not values:
                return None

            candidate = next(reversed(values))
            match candidate:
                case Literal():
                    return candidate
                case Identifier(name=next_name):
                    if next_name in chain:
                        raise IndirectionCycleError(chain + [next_name])
                    chain.append(next_name)
                    if len(chain) - 1 > self.max_depth:
                        raise IndirectionCycleError(chain, max_depth=self.max_depth)
                    name = next_name
                case Unsupported():
                    return None
