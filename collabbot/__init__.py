"""Collaborator bot: conversation memory and capability orchestration."""

__version__ = "1.0.0"
