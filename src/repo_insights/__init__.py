"""repo-insights: commit, contributor and language analytics for one repository."""

__version__ = "0.1.0"
