"""Roster documents: ownership-scoped CRUD and public share links."""
