"""
Service: daily_clock.py
Rôle:
- Choisir le pays du jour de manière déterministe (index dans le catalogue).
- Fournir la chaîne de date servant de graine aux tirages du jour.
- Calculer l'instant du prochain rollover et formater le compte à rebours.

Mode test:
- Une date virtuelle démarre à l'instant du lancement et avance d'un jour
  à chaque rollover (ou `skip_day`), le rollover survenant toutes les
  `TEST_COUNTDOWN_SECONDS` secondes au lieu de minuit.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional, Union

ONE_DAY = timedelta(days=1)

DateLike = Union[date, datetime]


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def daily_index(list_length: int, epoch: DateLike, reference: DateLike) -> int:
    """
    Index du pays du jour dans une liste de `list_length` éléments.
    - jours écoulés depuis `epoch` arrondis vers le bas (dates antérieures incluses),
    - modulo positif, 0 si la liste est vide.
    """
    if not list_length:
        return 0
    days_since_epoch = (_as_datetime(reference) - _as_datetime(epoch)) // ONE_DAY
    return ((days_since_epoch % list_length) + list_length) % list_length


def seed_string(reference: DateLike) -> str:
    """Date calendaire `YYYY-MM-DD` utilisée comme graine du jour."""
    return _as_datetime(reference).date().isoformat()


def next_midnight(now: datetime) -> datetime:
    return datetime.combine(now.date() + ONE_DAY, time.min, tzinfo=now.tzinfo)


def format_countdown(remaining: timedelta, show_hours: bool = True) -> str:
    """`HH:MM:SS` (rollover à minuit) ou `MM:SS` (intervalles de test)."""
    total_seconds = max(0, int(remaining.total_seconds()))
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if show_hours:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


@dataclass
class DailyClock:
    epoch: date
    test_mode: bool = False
    countdown_seconds: int = 30
    now_fn: Callable[[], datetime] = field(default=datetime.now, repr=False)
    virtual_date: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.test_mode and self.virtual_date is None:
            self.virtual_date = self.now_fn()

    def now(self) -> datetime:
        return self.now_fn()

    @property
    def show_hours(self) -> bool:
        return not self.test_mode

    def reference_date(self) -> datetime:
        """Date "du jour" : virtuelle en mode test, horloge murale sinon."""
        if self.test_mode and self.virtual_date is not None:
            return self.virtual_date
        return self.now()

    def advance(self) -> None:
        """Avance la date virtuelle d'un jour (sans effet hors mode test)."""
        if self.test_mode and self.virtual_date is not None:
            self.virtual_date = self.virtual_date + ONE_DAY

    def next_rollover(self) -> datetime:
        now = self.now()
        if self.test_mode:
            return now + timedelta(seconds=self.countdown_seconds)
        return next_midnight(now)

    def index_for(self, list_length: int) -> int:
        return daily_index(list_length, self.epoch, self.reference_date())

    def seed(self) -> str:
        return seed_string(self.reference_date())
