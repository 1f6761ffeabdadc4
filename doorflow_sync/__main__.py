"""
Entry point for running doorflow_sync as a module.

Usage:
    python -m doorflow_sync --help
    python -m doorflow_sync auth
    python -m doorflow_sync sync --dry-run
"""

from doorflow_sync.cli import cli

if __name__ == "__main__":
    cli()
