"""External collaborators."""
