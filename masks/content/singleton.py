"""Process-wide content cache.

Handlers read content through `get_content()`; the app fills the cache on
startup and tests fill it from `tests/data` before anything else runs.
"""

from __future__ import annotations

import logging
from pathlib import Path

from masks.content.registry import GameContent, load_game_content

logger = logging.getLogger(__name__)

_CONTENT: GameContent | None = None

# masks/content/singleton.py -> repository root
_REPO_ROOT = Path(__file__).resolve().parents[2]


def init_content(*, project_root: Path) -> GameContent:
    """Load content from `project_root/data` unless it is already cached."""

    global _CONTENT
    if _CONTENT is None:
        _CONTENT = load_game_content(root=project_root)
        logger.info(
            "loaded content: %d masks, %d actions, %d events, %d zones",
            len(_CONTENT.masks),
            len(_CONTENT.actions),
            len(_CONTENT.events),
            len(_CONTENT.zones),
        )
    return _CONTENT


def init_content_for_app() -> GameContent:
    return init_content(project_root=_REPO_ROOT)


def reset_content_for_tests() -> None:
    global _CONTENT
    _CONTENT = None


def get_content() -> GameContent:
    if _CONTENT is None:
        raise RuntimeError("Content is not loaded; call init_content() first")
    return _CONTENT
