"""Connect 4 rules on top of the generic engine."""

from .engine import CONNECT4_CONFIG, DRAW_REASON, WIN_REASON, Connect4Rules

__all__ = [
    "CONNECT4_CONFIG",
    "DRAW_REASON",
    "WIN_REASON",
    "Connect4Rules",
]
