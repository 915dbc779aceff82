"""task-spanner: hierarchical task tree with pluggable storage backends."""

__version__ = "0.1.0"
