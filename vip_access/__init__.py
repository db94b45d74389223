"""VIP access service - membership-tier lookup backend.

One SQLite table maps a login to a membership tier:
- Public: `/api/check/{login}?tier=VIP` answers "does this user meet the tier?"
- Admin: list / add / remove accounts behind a shared secret header.

Tiers are ranked AFFILIATE < VIP < MASTER < ELITE.
"""

__all__ = ["__version__"]

__version__ = "0.3.0"
