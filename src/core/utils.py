"""Shared utility functions for the collector."""


def format_elapsed(seconds: int) -> str:
    """Render a whole-second count as ``MM:SS``."""
    mins, secs = divmod(max(int(seconds), 0), 60)
    return f"{mins:02d}:{secs:02d}"
