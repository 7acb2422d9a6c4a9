"""Per-user match log (played games and their results)."""
