"""
Infrastructure layer for repoparse.

Contains abstractions for external systems:
- open_database: Text lines of database archives, desc files and stdin
- database_name: Repository name derived from a database path

These provide clean interfaces that can be replaced for testing.
"""

from .archive import open_database, database_name, STDIN

__all__ = [
    'open_database',
    'database_name',
    'STDIN',
]
