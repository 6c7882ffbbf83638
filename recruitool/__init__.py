"""Core package for the Recruitool legacy database migrator.

The migration pipeline lives in :mod:`recruitool.migration`; the command line
front end in :mod:`recruitool.cli`.
"""

__all__: list[str] = []
