"""Command line interface for release-note."""

from __future__ import annotations

from release_note.cli.main import build_parser, main

__all__ = ["build_parser", "main"]
