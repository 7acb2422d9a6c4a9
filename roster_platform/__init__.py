"""Roster Platform - Backend.

REST backend for a roster-building application:
- Users register and keep their rosters (and match logs) in the cloud.
- Rosters can be exposed read-only through an unguessable share link.
- A small admin-editable game data catalog is served to everyone.

Core concepts:
- Every private read/write is scoped to the caller's user_id in SQL.
- Identity comes from a signed JWT; admin rights come from its claims.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
