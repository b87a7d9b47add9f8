"""
Provides the same behaviour as invoking ``opfmeta.cli`` but is more
convenient for end-users: ``python -m opfmeta show metadata.opf``.
"""
from __future__ import annotations

from .cli import cli

if __name__ == "__main__":
    cli()
