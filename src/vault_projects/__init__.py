"""Project index for Obsidian-style markdown vaults."""

__version__ = "0.1.0"
