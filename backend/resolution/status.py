"""Per-domain provider status codes that mean "final result available"."""
from __future__ import annotations

from shared.models.enums import SportDomain

# AOT = after overtime, AP = after penalties/shootout. Hockey lists shootout
# wins as POST; in American football POST means postponed and is excluded.
TERMINAL_STATUSES: dict[SportDomain, frozenset[str]] = {
    SportDomain.SOCCER: frozenset({"FT"}),
    SportDomain.BASKETBALL: frozenset({"FT", "AOT", "AP"}),
    SportDomain.EUROLEAGUE: frozenset({"FT", "AOT", "AP"}),
    SportDomain.HOCKEY: frozenset({"FT", "AOT", "AP", "POST"}),
    SportDomain.AMERICAN_FOOTBALL: frozenset({"FT", "AOT"}),
    SportDomain.MMA: frozenset({"FT"}),
}


def is_terminal(domain: SportDomain, status_code: str) -> bool:
    return (status_code or "").strip().upper() in TERMINAL_STATUSES.get(domain, frozenset())
