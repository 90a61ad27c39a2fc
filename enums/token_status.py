"""
Enumeration for the status of a discovered token.

Candidates the engine did not buy stay visible in the recent-discoveries view
together with the reason they were discarded.
"""

from __future__ import annotations

from enum import Enum


class TokenStatus(str, Enum):
    """Possible states for a discovered token."""

    CANDIDATE = "candidate"
    EXCLUDED = "excluded"        # failed the eligibility filter
    NO_CAPACITY = "no_capacity"  # eligible but every slot was taken
