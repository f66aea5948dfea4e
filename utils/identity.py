"""Player identity keys used to group and deduplicate scores."""

from models import GameScore


def normalize_name(name: str) -> str:
    return name.strip().lower()


def identity_key(score: GameScore) -> str:
    """Profile URL when present, otherwise the player name, trimmed and lowercased."""
    if score.profile_url and score.profile_url.strip():
        return score.profile_url.strip().lower()
    return normalize_name(score.player_name)


def dedupe_by_identity(scores: list[GameScore]) -> list[GameScore]:
    """Keep the first score per identity, preserving order."""
    seen: set[str] = set()
    unique = []
    for score in scores:
        key = identity_key(score)
        if key in seen:
            continue
        seen.add(key)
        unique.append(score)
    return unique
