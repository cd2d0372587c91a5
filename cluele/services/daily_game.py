"""
Service: daily_game.py
Rôle:
- Orchestration du jeu du jour : catalogues, pays du jour, indices, partie en cours.
- Compte à rebours (tick 1 s) et rollover (nouveau pays + partie réinitialisée).

Flux:
- load_catalogs() / load_all() : chaque source arrive indépendamment ; la
  construction des indices est différée tant qu'une source n'a pas répondu
  (une source en échec compte comme arrivée mais vide).
- refresh_answer() : pays du jour + fiche détaillée + faits geogrid ; les
  réponses d'un pays périmé (génération dépassée) sont ignorées.
- submit_guess() / skip_clue() / skip_day() : transitions de `game_session`.

API interne exposée aux routes:
- GAME.view(), GAME.submit_guess(raw), GAME.update_toggles(...)
- GAME.skip_clue(), GAME.skip_day() (mode test uniquement)
- GAME.start_ticker(), GAME.abort_ticker()
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, fields, replace
from datetime import datetime, timedelta
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Tuple

import anyio

from cluele.config.settings import settings
from cluele.models.clue import Clue
from cluele.services.clue_selector import build_daily_clues
from cluele.services.daily_clock import DailyClock, format_countdown
from cluele.services.data_sources import CLIENT, CatalogClient
from cluele.services.game_session import (
    GuessOutcome,
    SessionState,
    initial_state,
    is_known_name,
    name_hint,
    share_message,
    skip_clue,
    submit_guess,
)
from cluele.services.ws_manager import WS

logger = logging.getLogger(__name__)

# Paramètres de l'effet confetti côté front (événement `celebrate`)
CONFETTI = {"particleCount": 150, "spread": 70, "origin": {"y": 0.6}}
SUGGEST_MIN_CHARS = 2
SUGGEST_LIMIT = 20


class DebugToolsDisabledError(RuntimeError):
    """Outil réservé au mode test (skip clue / skip day)."""


@dataclass
class Datasets:
    """Données du jour ; None = pas encore arrivée."""
    names: Optional[List[Dict[str, Any]]] = None
    cities: Optional[List[Dict[str, Any]]] = None
    products: Optional[List[Dict[str, Any]]] = None
    languages: Optional[List[Dict[str, Any]]] = None
    country: Optional[Dict[str, Any]] = None
    geogrid: Optional[Dict[str, Any]] = None

    def missing(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is None]


@dataclass
class Toggles:
    name_hint: bool = False
    flag_hint: bool = False
    infinite_clues: bool = False


class DailyGame:
    def __init__(
        self,
        client: CatalogClient,
        clock: DailyClock,
        *,
        share_url: str = settings.SHARE_URL,
        question_mark_img: str = settings.QUESTION_MARK_IMG,
    ) -> None:
        self._lock = RLock()
        self.client = client
        self.clock = clock
        self.share_url = share_url
        self.question_mark_img = question_mark_img

        self.data = Datasets()
        self.toggles = Toggles()
        self.answer_name = ""
        self.answer_code = ""
        self.generation = 0
        self.clues: List[Clue] = []
        self.clues_built = False
        self.state: SessionState = initial_state()
        self.target_time: datetime = clock.next_rollover()
        self._ticker_task: Optional[asyncio.Task] = None
        self._load_task: Optional[asyncio.Task] = None

    # -----------------------------
    # Catalogues
    # -----------------------------
    @property
    def test_mode(self) -> bool:
        return self.clock.test_mode

    @property
    def country_names(self) -> List[str]:
        """Noms anglais uniques (validation + autocomplétion)."""
        return list(dict.fromkeys(item["name"] for item in self.data.names or []))

    def _catalog_fetchers(self) -> List[Tuple[str, Callable[[], List[Dict[str, Any]]]]]:
        return [
            ("cities", self.client.fetch_cities),
            ("products", self.client.fetch_products),
            ("languages", self.client.fetch_languages),
        ]

    def set_dataset(self, name: str, value: Any) -> None:
        """Enregistre une source arrivée puis retente la construction des indices."""
        with self._lock:
            setattr(self.data, name, value if value is not None else [])
            logger.info("Dataset arrived", extra={"dataset": name, "size": len(value or [])})
            if name == "names":
                self._select_answer()
            self.rebuild_clues()

    def load_catalogs(self) -> None:
        """Chargement séquentiel (bloquant) de toutes les sources."""
        self.set_dataset("names", self.client.fetch_countries())
        self.load_answer_details()
        for name, fetch in self._catalog_fetchers():
            self.set_dataset(name, fetch())

    async def load_all(self) -> None:
        """Chargement concurrent : une tâche par source (threads anyio)."""

        async def _names_then_answer() -> None:
            names = await anyio.to_thread.run_sync(self.client.fetch_countries, abandon_on_cancel=True)
            self.set_dataset("names", names)
            await anyio.to_thread.run_sync(self.load_answer_details, abandon_on_cancel=True)

        async def _one(name: str, fetch: Callable[[], Any]) -> None:
            value = await anyio.to_thread.run_sync(fetch, abandon_on_cancel=True)
            self.set_dataset(name, value)

        async with anyio.create_task_group() as tg:
            tg.start_soon(_names_then_answer)
            for name, fetch in self._catalog_fetchers():
                tg.start_soon(_one, name, fetch)

    async def start_loading(self) -> None:
        """
        Lance `load_all()` en tâche de fond : le serveur répond pendant les
        téléchargements (indices différés jusqu'à l'arrivée des sources).
        """
        await self.abort_loading()

        async def _runner():
            try:
                await self.load_all()
            except Exception:
                logger.exception("Dataset loading failed")

        self._load_task = asyncio.create_task(_runner())

    async def abort_loading(self) -> None:
        """Annule le chargement en cours ; un résultat arrivé ensuite est ignoré."""
        if self._load_task and not self._load_task.done():
            self._load_task.cancel()
            try:
                await self._load_task
            except asyncio.CancelledError:
                pass
            with self._lock:
                # fiche / geogrid encore en vol : génération périmée
                self.generation += 1
        self._load_task = None

    @property
    def loading(self) -> bool:
        return bool(self._load_task and not self._load_task.done())

    # -----------------------------
    # Pays du jour
    # -----------------------------
    def _select_answer(self) -> int:
        """Recalcule le pays du jour ; invalide la fiche/geogrid de l'ancien."""
        with self._lock:
            names = self.data.names or []
            self.generation += 1
            self.data.country = None
            self.data.geogrid = None
            self.clues = []
            self.clues_built = False
            if not names:
                self.answer_name = ""
                self.answer_code = ""
                return self.generation
            item = names[self.clock.index_for(len(names))]
            self.answer_name = item.get("name") or ""
            self.answer_code = str(item.get("code") or "").lower()
            logger.info(
                "Answer selected",
                extra={"generation": self.generation, "seed": self.clock.seed(), "answer_code": self.answer_code},
            )
            return self.generation

    def _set_answer_data(self, generation: int, name: str, value: Dict[str, Any]) -> None:
        with self._lock:
            if generation != self.generation:
                logger.info("Stale answer data ignored", extra={"dataset": name, "generation": generation})
                return
            setattr(self.data, name, value or {})
            self.rebuild_clues()

    def load_answer_details(self) -> None:
        """Fiche détaillée + faits geogrid du pays courant (bloquant)."""
        with self._lock:
            generation = self.generation
            code = self.answer_code
        if not code:
            return
        self._set_answer_data(generation, "country", self.client.fetch_country(code))
        self._set_answer_data(generation, "geogrid", self.client.fetch_geogrid(code))

    def refresh_answer(self) -> None:
        self._select_answer()
        self.load_answer_details()

    # -----------------------------
    # Indices du jour
    # -----------------------------
    def rebuild_clues(self) -> bool:
        """Construit la séquence du jour si toutes les sources sont arrivées."""
        with self._lock:
            missing = self.data.missing()
            if missing or not self.answer_code:
                logger.debug("Clue generation deferred", extra={"missing": missing})
                return False
            self.clues = build_daily_clues(
                self.clock.seed(),
                country=self.data.country,
                answer_code=self.answer_code,
                names=self.data.names,
                cities=self.data.cities,
                products=self.data.products,
                languages=self.data.languages,
                geogrid=self.data.geogrid,
                infinite=self.toggles.infinite_clues,
            )
            self.clues_built = True
            if self.clues and self.state.hint_index >= len(self.clues):
                self.state = replace(self.state, hint_index=len(self.clues) - 1)
            logger.info("Daily clues ready", extra={"total": len(self.clues), "answer_code": self.answer_code})
            return True

    @property
    def ready(self) -> bool:
        return self.clues_built

    # -----------------------------
    # Partie
    # -----------------------------
    def is_known_country(self, name: str) -> bool:
        return is_known_name(name, self.country_names)

    def suggest_names(self, query: str) -> List[str]:
        """Autocomplétion : rien sous 2 caractères, sinon noms contenant `query`."""
        wanted = (query or "").strip().lower()
        if len(wanted) < SUGGEST_MIN_CHARS:
            return []
        return [name for name in self.country_names if wanted in name.lower()][:SUGGEST_LIMIT]

    def submit_guess(self, raw: str) -> GuessOutcome:
        with self._lock:
            outcome = submit_guess(
                self.state,
                raw,
                answer_name=self.answer_name if self.ready else "",
                known_names=self.country_names,
                clue_count=len(self.clues),
                infinite=self.toggles.infinite_clues,
            )
            self.state = outcome.state
            logger.info(
                "Guess submitted",
                extra={"status": outcome.status, "guesses_used": self.state.guesses_used},
            )
            return outcome

    def skip_clue(self) -> GuessOutcome:
        if not self.test_mode:
            raise DebugToolsDisabledError("skip_clue is only available in test mode")
        with self._lock:
            outcome = skip_clue(self.state, len(self.clues))
            self.state = outcome.state
            return outcome

    def skip_day(self) -> None:
        if not self.test_mode:
            raise DebugToolsDisabledError("skip_day is only available in test mode")
        self.rollover()

    def reset_session(self) -> None:
        with self._lock:
            self.state = initial_state()

    def update_toggles(
        self,
        name_hint: Optional[bool] = None,
        flag_hint: Optional[bool] = None,
        infinite_clues: Optional[bool] = None,
    ) -> Toggles:
        with self._lock:
            # refus avant toute modification : une requête rejetée ne change rien
            switch_infinite = infinite_clues is not None and infinite_clues != self.toggles.infinite_clues
            if switch_infinite and not self.test_mode:
                raise DebugToolsDisabledError("infinite clues are only available in test mode")
            if name_hint is not None:
                self.toggles.name_hint = name_hint
            if flag_hint is not None:
                self.toggles.flag_hint = flag_hint
            if switch_infinite:
                self.toggles.infinite_clues = infinite_clues
                self.rebuild_clues()
            return self.toggles

    # -----------------------------
    # Rollover / compte à rebours
    # -----------------------------
    def rollover(self) -> None:
        """Nouveau jour : date virtuelle (test), pays, indices, partie, échéance."""
        self.clock.advance()
        with self._lock:
            self.state = initial_state()
        self.refresh_answer()
        with self._lock:
            self.target_time = self.clock.next_rollover()
        logger.info("Daily rollover", extra={"seed": self.clock.seed(), "answer_code": self.answer_code})

    def remaining(self) -> timedelta:
        return self.target_time - self.clock.now()

    def countdown_text(self) -> str:
        return format_countdown(self.remaining(), self.clock.show_hours)

    async def tick(self) -> str:
        """Un tick : rollover si l'échéance est passée, puis diffusion du compte à rebours."""
        if self.remaining() <= timedelta(0):
            await anyio.to_thread.run_sync(self.rollover)
            await WS.broadcast_type("rollover", self.view())
        text = self.countdown_text()
        await WS.broadcast_type("countdown", {"countdown": text})
        return text

    async def start_ticker(self, interval: float = 1.0) -> None:
        """Démarre le tick 1 s (le précédent est annulé : jamais deux timers)."""
        await self.abort_ticker()
        self.target_time = self.clock.next_rollover()

        async def _runner():
            try:
                while True:
                    try:
                        await self.tick()
                    except Exception:
                        logger.exception("Countdown tick failed")
                    await asyncio.sleep(interval)
            except asyncio.CancelledError:
                return

        self._ticker_task = asyncio.create_task(_runner())

    async def abort_ticker(self) -> None:
        """Annule le tick en cours si nécessaire."""
        if self._ticker_task and not self._ticker_task.done():
            self._ticker_task.cancel()
            try:
                await self._ticker_task
            except asyncio.CancelledError:
                pass
        self._ticker_task = None

    @property
    def ticker_running(self) -> bool:
        return bool(self._ticker_task and not self._ticker_task.done())

    # -----------------------------
    # Vue pour le front
    # -----------------------------
    def flag_url(self) -> str:
        return self.client.flag_url(self.answer_code) if self.answer_code else ""

    def view(self) -> Dict[str, Any]:
        """Snapshot sérialisable de tout ce que le front affiche."""
        with self._lock:
            state = self.state
            total = len(self.clues)
            current = self.clues[state.hint_index] if state.hint_index < total else None
            flag = self.flag_url()
            reveal_flag = bool(flag) and (state.game_over or self.toggles.flag_hint)
            if self.toggles.infinite_clues:
                label = f"Clue {state.hint_index + 1} of {total}: "
            else:
                label = f"Clue {state.hint_index + 1}: "
            return {
                "ready": self.ready,
                "test_mode": self.test_mode,
                "image_src": flag if reveal_flag else self.question_mark_img,
                "blur_flag": self.toggles.flag_hint and not state.game_over,
                "clue_label": label,
                "clue_text": current.text if current else "",
                "clue_image_url": current.image_url if current else None,
                "clue_number": state.hint_index + 1,
                "total_clues": total,
                "shown_clues": [clue.model_dump(by_alias=True) for clue in self.clues[: state.hint_index + 1]],
                "show_all_clues_available": not state.game_over and state.hint_index >= 1,
                "name_hint": name_hint(self.answer_name, state.guesses_used, self.toggles.name_hint),
                "guesses_used": state.guesses_used,
                "previous_guesses": list(state.previous_guesses),
                "game_over": state.game_over,
                "outcome": state.outcome,
                "result_message": state.result_message,
                "guesses_info": state.guesses_info,
                "share_message": share_message(state, self.share_url),
                "countdown": self.countdown_text(),
                "toggles": {
                    "name_hint": self.toggles.name_hint,
                    "flag_hint": self.toggles.flag_hint,
                    "infinite_clues": self.toggles.infinite_clues,
                },
            }


# -----------------------------
# Singleton global
# -----------------------------
_instance: Optional[DailyGame] = None


def get_daily_game() -> DailyGame:
    """Garantit une unique instance `DailyGame` pour tout le backend (lazy)."""
    global _instance
    if _instance is None:
        clock = DailyClock(
            epoch=settings.EPOCH_DATE,
            test_mode=settings.TEST_MODE,
            countdown_seconds=settings.TEST_COUNTDOWN_SECONDS,
        )
        _instance = DailyGame(CLIENT, clock)
    return _instance
