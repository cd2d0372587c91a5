"""
Service: clue_selector.py
Rôle:
- Tirer la séquence d'indices du jour : 3 hard + 3 medium + 4 easy,
  chaque pool mélangé indépendamment (Fisher–Yates piloté par le rng du jour).
- Compléter jusqu'à 10 si un pool est trop court (best-effort).
- Mode "infini" : ajouter en queue tous les indices restants.

Déterminisme:
- Même chaîne de date + mêmes données → même séquence (un seul rng, consommé
  d'abord par les templates puis par les mélanges, toujours dans le même ordre).
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, TypeVar

from cluele.models.clue import Clue
from cluele.services.clue_bank import TIERS, ClueContext, build_pool
from cluele.services.prng import SeededRandom

logger = logging.getLogger(__name__)

T = TypeVar("T")

TIER_QUOTAS = {"hard": 3, "medium": 3, "easy": 4}
DAILY_CLUE_COUNT = sum(TIER_QUOTAS.values())


def shuffled(items: Sequence[T], rng: SeededRandom) -> List[T]:
    """Copie mélangée (Fisher–Yates depuis la fin)."""
    copy = list(items)
    for i in range(len(copy) - 1, 0, -1):
        j = rng.index(i + 1)
        copy[i], copy[j] = copy[j], copy[i]
    return copy


def _remaining(candidates: Iterable[Clue], taken: List[Clue]) -> List[Clue]:
    seen = {clue.text for clue in taken}
    result: List[Clue] = []
    for clue in candidates:
        if clue.text not in seen:
            seen.add(clue.text)
            result.append(clue)
    return result


def select_daily(
    hard: Sequence[Clue],
    medium: Sequence[Clue],
    easy: Sequence[Clue],
    rng: SeededRandom,
    infinite: bool = False,
) -> List[Clue]:
    pools = {
        "hard": shuffled(hard, rng),
        "medium": shuffled(medium, rng),
        "easy": shuffled(easy, rng),
    }

    daily: List[Clue] = []
    for tier in TIERS:
        daily.extend(_remaining(pools[tier][:TIER_QUOTAS[tier]], daily))

    leftovers = _remaining(pools["hard"] + pools["medium"] + pools["easy"], daily)
    if infinite:
        daily.extend(leftovers)
    elif len(daily) < DAILY_CLUE_COUNT:
        daily.extend(leftovers[:DAILY_CLUE_COUNT - len(daily)])

    logger.debug(
        "Daily clues selected",
        extra={"infinite": infinite, "total": len(daily), "leftovers": len(leftovers)},
    )
    return daily


def build_daily_clues(
    seed_str: str,
    *,
    country: dict,
    answer_code: str = "",
    names: list | None = None,
    cities: list | None = None,
    products: list | None = None,
    languages: list | None = None,
    geogrid: dict | None = None,
    infinite: bool = False,
) -> List[Clue]:
    """Construit les pools puis tire la séquence du jour pour `seed_str`."""
    rng = SeededRandom.from_string(seed_str)
    ctx = ClueContext(
        country=country or {},
        rng=rng,
        answer_code=answer_code,
        names=names or [],
        cities=cities or [],
        products=products or [],
        languages=languages or [],
        geogrid=geogrid or {},
    )
    hard = build_pool("hard", ctx)
    medium = build_pool("medium", ctx)
    easy = build_pool("easy", ctx)
    logger.info(
        "Clue pools built",
        extra={"seed": seed_str, "hard": len(hard), "medium": len(medium), "easy": len(easy)},
    )
    return select_daily(hard, medium, easy, rng, infinite=infinite)
