"""Inkpress static blog generator.

This package turns a directory of Markdown posts with YAML front-matter into
a static blog: post pages, tag pages, a sitemap, a tag index, and schema.org
structured data for each page.

The core is the post repository in ``inkpress.repository``, reading the
posts that ``inkpress.content`` loads. It parses every post's front-matter,
derives the tag taxonomy, sorts and filters posts, and renders Markdown
bodies to HTML with citation links resolved. Everything else
(templates, feeds, the build and the CLI) consumes the data it produces.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
