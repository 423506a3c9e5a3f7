"""Programmer-error exceptions raised by the Klondike engine.

Ordinary rule violations (illegal moves, drawing from an exhausted stock,
commands while paused) never raise; they return False/None/[].
"""


class EngineError(RuntimeError):
    """Base class for engine misuse."""


class CardNotFoundError(EngineError, LookupError):
    """A card reference is not where the caller said it is, or nowhere at all."""

    def __init__(self, card, stack=None):
        self.card = card
        self.stack = stack
        if stack is None:
            msg = f"card {card!r} is not in any stack"
        else:
            msg = f"card {card!r} is not in {stack!r}"
        super().__init__(msg)


class InvalidDeckError(EngineError, ValueError):
    """A deal or a saved game does not hold exactly the 52-card set, or its data is malformed."""


class IntegrityError(EngineError):
    """Stacks no longer hold each of the 52 cards exactly once."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__(f"stack integrity check failed with {len(self.errors)} error(s)")
