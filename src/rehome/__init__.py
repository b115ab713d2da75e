"""rehome - Re-create GitHub issues under a bot identity and keep them in parity."""

__version__ = "0.1.0"
