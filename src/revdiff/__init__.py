"""revdiff — reconstruct review file contents across checkpoints."""

__version__ = "0.1.0"
