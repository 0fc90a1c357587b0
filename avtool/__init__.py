"""Git and GitHub helpers for stacked-branch workflows, with editor, user-state and version utilities."""

__version__ = "0.1.0"