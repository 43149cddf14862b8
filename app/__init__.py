"""WorkSpace Hub: role-based workspace file manager."""

__version__ = "0.1.0"
