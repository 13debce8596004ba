"""Parsing and storage for markdown project documents."""
