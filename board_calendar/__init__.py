"""Board calendar synchronization and policy engine."""

__version__ = "0.1.0"
