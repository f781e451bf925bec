"""lingopress — publish translated drafts of Chinese source text per language."""

__version__ = "0.1.0"
