"""mdrelink: keeps cross-file Markdown links valid across renames and heading edits."""

__version__ = "0.1.0"
