"""Keep Obsidian-style project notes in sync with Todoist projects."""

__version__ = "0.3.0"
