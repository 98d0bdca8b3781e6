import random
from typing import Iterable, List, Optional, Sequence

from meetup.models.user import User


def interest_overlap(first: Optional[Iterable[str]], second: Optional[Iterable[str]]) -> int:
    return len(set(first or ()) & set(second or ()))


def suggest_users(
    user: User,
    candidates: Sequence[User],
    limit: int = 10,
    rng: Optional[random.Random] = None,
) -> List[User]:
    """Rank candidates by shared interests.

    Users with nothing in common are left out; equal scores are shuffled so
    repeated calls surface different people.
    """
    if not user.interests:
        return []

    rng = rng or random.Random()
    scored = []
    for candidate in candidates:
        if candidate.id == user.id:
            continue
        score = interest_overlap(user.interests, candidate.interests)
        if score:
            scored.append((score, rng.random(), candidate))

    scored.sort(key=lambda item: (-item[0], item[1]))
    return [candidate for _, _, candidate in scored[:limit]]
