"""repodiff: compare two file trees under layered .gitignore rules."""

__version__ = "0.1.0"
