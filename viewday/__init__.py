"""viewday - keep a Viewday calendar in sync with note frontmatter."""

__version__ = "0.1.0"
