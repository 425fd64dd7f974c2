"""Inkpress error hierarchy.

All project exceptions inherit from InkpressError so the CLI can catch them
at one boundary while library code catches the specific ones.

Hierarchy (subclasses defined in their respective modules):
    InkpressError                   # this module
    ├── MalformedDocumentError      # extractors.py
    ├── PostNotFoundError           # content.py
    └── BuildError                  # build.py
"""

from __future__ import annotations


class InkpressError(Exception):
    """Base class for all Inkpress errors."""
