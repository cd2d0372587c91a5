"""
Service: clue_bank.py
Rôle:
- Registre des templates d'indices, groupés par difficulté (hard / medium / easy).
- Chaque template reçoit le contexte complet du jour (`ClueContext`) et renvoie
  un indice (str, dict `{text, imageUrl}` ou `Clue`) ou None si non applicable.

Règles:
- Un template qui lève une exception est journalisé et compte comme None.
- Faits booléens (geogrid) : indice positif ou négatif uniquement si le fait est présent.
- Faits numériques / listes : indice seulement si la valeur est présente et non vide.
- Les templates qui choisissent parmi plusieurs candidats tirent via `ctx.rng`
  (graine du jour), jamais via `random`.
- L'ordre de déclaration est conservé : il fixe l'ordre de consommation du rng.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlparse

from cluele.models.clue import Clue
from cluele.services.prng import SeededRandom

logger = logging.getLogger(__name__)

TIERS = ("hard", "medium", "easy")

CONTINENT_NAMES = {
    "EU": "Europe",
    "OC": "Oceania",
    "AS": "Asia",
    "NA": "North America",
    "AF": "Africa",
    "SA": "South America",
    "AN": "Antarctica",
}

_DIRECT_IMAGE_RE = re.compile(r"\.(jpg|jpeg|png|webp|gif)$", re.IGNORECASE)
_UNSPLASH_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass
class ClueContext:
    """Faits disponibles pour le pays du jour (données brutes JSON)."""
    country: Dict[str, Any]
    rng: SeededRandom
    answer_code: str = ""
    names: List[Dict[str, Any]] = field(default_factory=list)
    cities: List[Dict[str, Any]] = field(default_factory=list)
    products: List[Dict[str, Any]] = field(default_factory=list)
    languages: List[Dict[str, Any]] = field(default_factory=list)
    geogrid: Dict[str, Any] = field(default_factory=dict)

    def fact(self, group: str, key: str) -> Any:
        """Lecture tolérante d'un fait geogrid (`flagInfo.hasStar`…)."""
        section = (self.geogrid or {}).get(group) or {}
        return section.get(key)


ClueFn = Callable[[ClueContext], Any]


@dataclass(frozen=True)
class ClueTemplate:
    name: str
    tier: str
    fn: ClueFn

    def render(self, ctx: ClueContext) -> Optional[Clue]:
        try:
            clue = Clue.coerce(self.fn(ctx))
            if clue is not None and clue.image_url:
                clue = clue.model_copy(update={"image_url": to_embeddable_image_url(clue.image_url)})
        except Exception:
            logger.warning(
                "Clue template failed",
                exc_info=True,
                extra={"clue_template": self.name, "tier": self.tier},
            )
            return None
        return clue


TEMPLATES: Dict[str, List[ClueTemplate]] = {tier: [] for tier in TIERS}


def clue_template(tier: str, name: str) -> Callable[[ClueFn], ClueFn]:
    """Décorateur d'enregistrement (ordre de déclaration = ordre d'évaluation)."""
    if tier not in TEMPLATES:
        raise ValueError(f"Unknown clue tier: {tier}")

    def decorator(fn: ClueFn) -> ClueFn:
        TEMPLATES[tier].append(ClueTemplate(name=name, tier=tier, fn=fn))
        return fn

    return decorator


def get_template(name: str) -> ClueTemplate:
    for templates in TEMPLATES.values():
        for template in templates:
            if template.name == name:
                return template
    raise KeyError(name)


def build_pool(tier: str, ctx: ClueContext) -> List[Clue]:
    """Évalue tous les templates d'un tier et garde les résultats non vides."""
    pool: List[Clue] = []
    for template in TEMPLATES[tier]:
        clue = template.render(ctx)
        if clue is not None:
            pool.append(clue)
    logger.debug("Clue pool built", extra={"tier": tier, "size": len(pool)})
    return pool


# -----------------------------
# Jointures sur les catalogues
# -----------------------------
def country_name_from_code(code: Optional[str], names: List[Dict[str, Any]]) -> Optional[str]:
    """Nom anglais d'un pays à partir de son code ISO (le code lui-même à défaut)."""
    if not code:
        return code
    wanted = str(code).lower()
    for item in names or []:
        if item.get("code") and str(item["code"]).lower() == wanted:
            return item.get("name") or code
    return code


def _cities_of(ctx: ClueContext, capital: bool) -> List[str]:
    if not ctx.answer_code:
        return []
    wanted = ctx.answer_code.upper()
    return [
        city["names"]["en"]
        for city in ctx.cities or []
        if city.get("countryCode") == wanted
        and city.get("capital") is capital
        and (city.get("names") or {}).get("en")
    ]


def random_non_capital_city(ctx: ClueContext) -> Optional[str]:
    candidates = _cities_of(ctx, capital=False)
    if not candidates:
        return None
    return candidates[ctx.rng.index(len(candidates))]


def capital_city(ctx: ClueContext) -> Optional[str]:
    candidates = _cities_of(ctx, capital=True)
    return candidates[0] if candidates else None


def _top_exports(country: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
    exports = country.get("topExports")
    if isinstance(exports, list):
        return exports
    exports = (country.get("productData") or {}).get("topExports")
    if isinstance(exports, list):
        return exports
    return None


def random_top_export(ctx: ClueContext) -> Optional[str]:
    exports = _top_exports(ctx.country)
    if not exports or not ctx.products:
        return None
    picked = exports[ctx.rng.index(len(exports))] or {}
    code = picked.get("productCode")
    if not code:
        return None
    for product in ctx.products:
        if product.get("productCode") == code:
            return (product.get("names") or {}).get("en")
    return None


def random_language(ctx: ClueContext) -> Optional[str]:
    spoken = (ctx.country.get("languageData") or {}).get("languages")
    if not isinstance(spoken, list) or not spoken or not ctx.languages:
        return None
    picked = spoken[ctx.rng.index(len(spoken))] or {}
    code = picked.get("languageCode")
    if not code:
        return None
    for language in ctx.languages:
        if language.get("languageCode") == code:
            return (language.get("names") or {}).get("en")
    return None


def _pick(ctx: ClueContext, values: Any) -> Optional[Any]:
    if not isinstance(values, list) or not values:
        return None
    return values[ctx.rng.index(len(values))]


def _yes_no(value: Any, positive: str, negative: str) -> Optional[str]:
    if value is None:
        return None
    return positive if value else negative


def to_embeddable_image_url(url: Any) -> Optional[str]:
    """
    Convertit une URL de page photo en image intégrable.
    - lien direct (.jpg/.png/…) : inchangé,
    - page Unsplash : `source.unsplash.com/<id>/1200x800`,
    - autre (Pixabay, pages HTML…) : None.
    """
    if not url or not isinstance(url, str):
        return None
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    if _DIRECT_IMAGE_RE.search(parsed.path):
        return url
    if "unsplash.com" in parsed.netloc.lower():
        segments = [s for s in parsed.path.split("/") if s]
        last = segments[-1] if segments else ""
        photo_id = last.split("-")[-1]
        if photo_id and _UNSPLASH_ID_RE.match(photo_id):
            return f"https://source.unsplash.com/{photo_id}/1200x800"
    return None


# =============================
# HARD
# =============================
@clue_template("hard", "border_count")
def _border_count(ctx: ClueContext):
    borders = ctx.country.get("borders")
    if isinstance(borders, list) and borders:
        return f"It borders {len(borders)} countries."
    return None


@clue_template("hard", "area")
def _area(ctx: ClueContext):
    size = ctx.country.get("size")
    if isinstance(size, (int, float)) and not isinstance(size, bool):
        return f"Its area is around {size} km²."
    return None


@clue_template("hard", "non_capital_city")
def _non_capital_city(ctx: ClueContext):
    city = random_non_capital_city(ctx)
    return f"A city from this country is {city}." if city else None


@clue_template("hard", "top_export")
def _top_export(ctx: ClueContext):
    product = random_top_export(ctx)
    return f"One of this country's top exports is {product}." if product else None


@clue_template("hard", "flag_star")
def _flag_star(ctx: ClueContext):
    return _yes_no(
        ctx.fact("flagInfo", "hasStar"),
        "This country has a star on its flag.",
        "This country does not have a star on its flag.",
    )


@clue_template("hard", "flag_coat_of_arms")
def _flag_coat_of_arms(ctx: ClueContext):
    return _yes_no(
        ctx.fact("flagInfo", "hasCoatOfArms"),
        "This country has a coat of arms on its flag.",
        "This country does not have a coat of arms on its flag.",
    )


@clue_template("hard", "flag_animal")
def _flag_animal(ctx: ClueContext):
    return _yes_no(
        ctx.fact("flagInfo", "hasAnimal"),
        "This country has an animal on its flag.",
        "This country does not have an animal on its flag.",
    )


@clue_template("hard", "coastline_length")
def _coastline_length(ctx: ClueContext):
    length = ctx.fact("geographyInfo", "coastlineLength")
    return f"Its coastline is {length} km long." if length else None


@clue_template("hard", "gdp_per_capita")
def _gdp_per_capita(ctx: ClueContext):
    gdp = ctx.fact("economicInfo", "GDPPerCapita")
    return f"This country's GDP per capita is {gdp} US dollars." if gdp else None


@clue_template("hard", "nuclear_weapons")
def _nuclear_weapons(ctx: ClueContext):
    return _yes_no(
        ctx.fact("politicalInfo", "hasNuclearWeapons"),
        "This country has nuclear weapons.",
        "This country does not have nuclear weapons.",
    )


@clue_template("hard", "former_ussr")
def _former_ussr(ctx: ClueContext):
    return _yes_no(
        ctx.fact("politicalInfo", "wasUSSR"),
        "This country was in the USSR.",
        "This country was not in the USSR.",
    )


@clue_template("hard", "hosted_f1")
def _hosted_f1(ctx: ClueContext):
    return _yes_no(
        ctx.fact("sportsInfo", "hostedF1"),
        "This country has hosted Formula 1.",
        "This country has not hosted Formula 1.",
    )


@clue_template("hard", "hosted_world_cup")
def _hosted_world_cup(ctx: ClueContext):
    return _yes_no(
        ctx.fact("sportsInfo", "hostedMensWorldCup"),
        "This country has hosted the men's FIFA World Cup.",
        "This country has not hosted the men's FIFA World Cup.",
    )


# =============================
# MEDIUM
# =============================
@clue_template("medium", "population")
def _population(ctx: ClueContext):
    population = ctx.country.get("population")
    if isinstance(population, (int, float)) and not isinstance(population, bool):
        return f"Population is roughly {population} people."
    return None


@clue_template("medium", "currency")
def _currency(ctx: ClueContext):
    currency = ctx.country.get("currencyData")
    if not currency:
        return None
    name = currency.get("name")
    if not name and isinstance(currency.get("nameChoices"), list) and currency["nameChoices"]:
        name = currency["nameChoices"][0]
    return f"One of its currencies is {name}." if name else None


@clue_template("medium", "island_nation")
def _island_nation(ctx: ClueContext):
    return _yes_no(
        ctx.fact("geographyInfo", "islandNation"),
        "This country is an island nation.",
        "This country is not an island nation.",
    )


@clue_template("medium", "eu_member")
def _eu_member(ctx: ClueContext):
    return _yes_no(
        ctx.fact("politicalInfo", "inEU"),
        "This country is in the EU.",
        "This country is not in the EU.",
    )


@clue_template("medium", "landlocked")
def _landlocked(ctx: ClueContext):
    return _yes_no(
        ctx.fact("geographyInfo", "landlocked"),
        "This country is landlocked.",
        "This country is not landlocked.",
    )


@clue_template("medium", "olympic_medals")
def _olympic_medals(ctx: ClueContext):
    medals = ctx.fact("sportsInfo", "olympicMedals")
    if medals is None:
        return None
    if not medals:
        return "It has no Olympic medals."
    return f"It has {medals} Olympic medals."


@clue_template("medium", "monarchy")
def _monarchy(ctx: ClueContext):
    return _yes_no(
        ctx.fact("politicalInfo", "isMonarchy"),
        "This country is a monarchy.",
        "This country is not a monarchy.",
    )


@clue_template("medium", "commonwealth")
def _commonwealth(ctx: ClueContext):
    return _yes_no(
        ctx.fact("politicalInfo", "isCommonwealth"),
        "This country is a member of the Commonwealth.",
        "This country is not a member of the Commonwealth.",
    )


@clue_template("medium", "same_sex_marriage")
def _same_sex_marriage(ctx: ClueContext):
    # clé geogrid orthographiée ainsi dans la source
    return _yes_no(
        ctx.fact("politicalInfo", "sameSexMarrigeLegal"),
        "Same-sex marriage is legal here.",
        "Same-sex marriage is illegal here.",
    )


@clue_template("medium", "hosted_olympics")
def _hosted_olympics(ctx: ClueContext):
    return _yes_no(
        ctx.fact("sportsInfo", "hostedOlympics"),
        "This country has hosted the Olympics.",
        "This country has not hosted the Olympics.",
    )


@clue_template("medium", "played_world_cup")
def _played_world_cup(ctx: ClueContext):
    return _yes_no(
        ctx.fact("sportsInfo", "playedMensWorldCup"),
        "This country has played in the men's FIFA World Cup.",
        "This country has not played in the men's FIFA World Cup.",
    )


@clue_template("medium", "won_world_cup")
def _won_world_cup(ctx: ClueContext):
    return _yes_no(
        ctx.fact("sportsInfo", "wonMensWorldCup"),
        "This country has won the men's FIFA World Cup.",
        "This country has not won the men's FIFA World Cup.",
    )


@clue_template("medium", "alcohol_ban")
def _alcohol_ban(ctx: ClueContext):
    return _yes_no(
        ctx.fact("factsInfo", "hasAlchoholBan"),
        "This country has banned alcohol.",
        "This country has not banned alcohol.",
    )


@clue_template("medium", "top_tourism")
def _top_tourism(ctx: ClueContext):
    return _yes_no(
        ctx.fact("factsInfo", "top20TourismRate"),
        "This country is in the top 20 for tourism.",
        "This country is not in the top 20 for tourism.",
    )


# =============================
# EASY
# =============================
@clue_template("easy", "continent")
def _continent(ctx: ClueContext):
    continent = ctx.country.get("continent")
    if not continent:
        return None
    full_name = CONTINENT_NAMES.get(str(continent).upper(), continent)
    return f"It is located in {full_name}."


@clue_template("easy", "neighbour")
def _neighbour(ctx: ClueContext):
    neighbour = _pick(ctx, ctx.country.get("borders"))
    if not neighbour:
        return None
    return f"It shares a border with {country_name_from_code(neighbour, ctx.names)}."


@clue_template("easy", "iso_initial")
def _iso_initial(ctx: ClueContext):
    code = ctx.country.get("code")
    return f"Its ISO code starts with {str(code)[0].upper()}." if code else None


@clue_template("easy", "name_length")
def _name_length(ctx: ClueContext):
    name = ctx.country.get("name")
    return f"Its name has {len(name)} letters." if name else None


@clue_template("easy", "capital")
def _capital(ctx: ClueContext):
    capital = ctx.country.get("capital")
    if not capital:
        return None
    return f"The capital city of this country is: {capital_city(ctx) or capital}."


@clue_template("easy", "latitude")
def _latitude(ctx: ClueContext):
    latitude = ctx.country.get("latitude")
    return f"Its latitude is: {latitude}." if latitude is not None else None


@clue_template("easy", "longitude")
def _longitude(ctx: ClueContext):
    longitude = ctx.country.get("longitude")
    return f"Its longitude is: {longitude}." if longitude is not None else None


@clue_template("easy", "language")
def _language(ctx: ClueContext):
    language = random_language(ctx)
    return f"One of the languages this country speaks is {language}." if language else None


@clue_template("easy", "flag_colour")
def _flag_colour(ctx: ClueContext):
    colour = _pick(ctx, ctx.fact("flagInfo", "colorsOnFlag"))
    return f"This country has {colour} on its flag." if colour else None


@clue_template("easy", "coastline")
def _coastline(ctx: ClueContext):
    water = _pick(ctx, ctx.fact("geographyInfo", "coastline"))
    return f"This country's coastline is on the {water}." if water else None


@clue_template("easy", "timezone")
def _timezone(ctx: ClueContext):
    timezone = _pick(ctx, ctx.fact("politicalInfo", "timeZones"))
    return f"One of this country's timezones is {timezone}." if timezone else None

