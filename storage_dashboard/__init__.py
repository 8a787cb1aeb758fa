"""Local dashboard API for an editor's workspace and global storage."""

__version__ = "0.1.0"
