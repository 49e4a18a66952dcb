"""gitlink — find leaked secrets in a working tree and its git history."""

__version__ = "0.3.0"
