"""listkeeper — persistent URL pattern lists with backend sync reconciliation."""

__version__ = "0.3.0"
