"""actas - admin impersonation service."""

__version__ = "0.1.0"
