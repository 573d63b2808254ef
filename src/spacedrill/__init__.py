"""spacedrill: spaced-repetition scheduling and undoable review sessions."""

from spacedrill.consts import VERSION

__version__ = VERSION
