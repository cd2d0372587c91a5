from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace
from typing import Any, Dict
from unittest.mock import Mock

import pytest

from cluele.services.daily_clock import DailyClock
from cluele.services.daily_game import DailyGame

EPOCH = date(2025, 7, 23)

NAMES = [
    {"name": "France", "code": "FR"},
    {"name": "Germany", "code": "DE"},
    {"name": "Spain", "code": "ES"},
    {"name": "Italy", "code": "IT"},
    {"name": "Portugal", "code": "PT"},
    {"name": "Belgium", "code": "BE"},
    {"name": "Austria", "code": "AT"},
    {"name": "Poland", "code": "PL"},
    {"name": "Norway", "code": "NO"},
    {"name": "Sweden", "code": "SE"},
    {"name": "Japan", "code": "JP"},
    {"name": "Kenya", "code": "KE"},
]

CITIES = [
    {"countryCode": "FR", "capital": True, "names": {"en": "Paris"}},
    {"countryCode": "FR", "capital": False, "names": {"en": "Lyon"}},
    {"countryCode": "FR", "capital": False, "names": {"en": "Marseille"}},
    {"countryCode": "DE", "capital": True, "names": {"en": "Berlin"}},
    {"countryCode": "DE", "capital": False, "names": {"en": "Hamburg"}},
]

PRODUCTS = [
    {"productCode": "8703", "names": {"en": "Cars"}},
    {"productCode": "8802", "names": {"en": "Aircraft"}},
    {"productCode": "2204", "names": {"en": "Wine"}},
]

LANGUAGES = [
    {"languageCode": "fr", "names": {"en": "French"}},
    {"languageCode": "de", "names": {"en": "German"}},
    {"languageCode": "br", "names": {"en": "Breton"}},
]

GEOGRID = {
    "flagInfo": {"hasStar": False, "hasCoatOfArms": False, "hasAnimal": False, "colorsOnFlag": ["blue", "white", "red"]},
    "geographyInfo": {"coastlineLength": 4853, "islandNation": False, "landlocked": False,
                      "coastline": ["Atlantic Ocean", "Mediterranean Sea"]},
    "economicInfo": {"GDPPerCapita": 44408},
    "politicalInfo": {"hasNuclearWeapons": True, "wasUSSR": False, "inEU": True, "isMonarchy": False,
                      "isCommonwealth": False, "sameSexMarrigeLegal": True, "timeZones": ["UTC+01:00"]},
    "sportsInfo": {"hostedF1": True, "hostedMensWorldCup": True, "olympicMedals": 889, "hostedOlympics": True,
                   "playedMensWorldCup": True, "wonMensWorldCup": True},
    "factsInfo": {"hasAlchoholBan": False, "top20TourismRate": True},
}


def country_detail(code: str) -> Dict[str, Any]:
    """Fiche détaillée minimale mais complète pour n'importe quel code."""
    name = next(item["name"] for item in NAMES if item["code"].lower() == code.lower())
    return {
        "name": name,
        "code": code.upper(),
        "latitude": 46.2,
        "longitude": 2.2,
        "borders": ["be", "de", "es"],
        "size": 551695,
        "capital": "Paris" if code.lower() == "fr" else f"{name} City",
        "continent": "EU",
        "population": 67000000,
        "currencyData": {"name": "Euro"},
        "topExports": [{"productCode": "8703"}, {"productCode": "8802"}, {"productCode": "2204"}],
        "languageData": {"languages": [{"languageCode": "fr"}, {"languageCode": "br"}]},
    }


def make_client(**overrides) -> SimpleNamespace:
    client = SimpleNamespace(
        fetch_countries=Mock(return_value=list(NAMES)),
        fetch_cities=Mock(return_value=list(CITIES)),
        fetch_products=Mock(return_value=list(PRODUCTS)),
        fetch_languages=Mock(return_value=list(LANGUAGES)),
        fetch_country=Mock(side_effect=country_detail),
        fetch_geogrid=Mock(return_value=dict(GEOGRID)),
        flag_url=lambda code: f"https://flags.test/{code.lower()}.svg",
    )
    for key, value in overrides.items():
        setattr(client, key, value)
    return client


class FakeNow:
    """Horloge pilotable pour les tests."""

    def __init__(self, value: datetime) -> None:
        self.value = value

    def __call__(self) -> datetime:
        return self.value


@pytest.fixture
def fake_now():
    return FakeNow(datetime(2025, 7, 25, 12, 0, 0))


@pytest.fixture
def client_stub():
    return make_client()


@pytest.fixture
def make_game(client_stub, fake_now):
    def _factory(test_mode: bool = False, client=None) -> DailyGame:
        clock = DailyClock(epoch=EPOCH, test_mode=test_mode, countdown_seconds=30, now_fn=fake_now)
        return DailyGame(client or client_stub, clock, share_url="https://cluele.test/", question_mark_img="qm.png")

    return _factory


@pytest.fixture
def loaded_game(make_game):
    game = make_game()
    game.load_catalogs()
    return game
