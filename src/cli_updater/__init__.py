"""Update checks and self-update for command-line tools.

Looks up the latest published version of the running tool, compares it with
the installed one, and can re-install the tool through its package manager.
"""

__version__ = "0.1.0"
