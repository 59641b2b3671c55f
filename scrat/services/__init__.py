"""Adapters between the ship workflow and external tools (git, gh, git-cliff).

Modules here are imported directly; this package does not re-export them.
"""
