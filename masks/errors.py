from __future__ import annotations


class GameError(ValueError):
    """Base class for failures that abort a whole request before any mutation."""


class NotFoundError(GameError):
    pass


class PreconditionError(GameError):
    pass


class PlayerBusyError(GameError):
    pass


class ContentLoadError(RuntimeError):
    pass
