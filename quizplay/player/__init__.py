"""Quiz player components."""

from .console_player import ConsolePlayer
from .session_driver import SessionDriver

__all__ = [
    "ConsolePlayer",
    "SessionDriver",
]
