"""
Service: data_sources.py
- Centralise les lectures des catalogues JSON statiques (CDN tiers).
- Un échec réseau / JSON n'est jamais propagé au front : il est journalisé
  et le jeu de données correspondant reste vide (les templates qui en dépendent
  ne produisent simplement aucun indice).

Sources:
- pays (noms + codes), fiche détaillée par pays, villes, produits, langues,
- faits "geogrid" par pays (optionnels : 404 = cas normal),
- drapeau par code (URL uniquement, pas de téléchargement).
"""
import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from cluele.config.settings import settings

logger = logging.getLogger(__name__)


class DataSourceError(RuntimeError):
    """Erreur encapsulant un échec de lecture d'une source JSON."""


class GeogridNotFound(DataSourceError):
    """Aucun fait geogrid publié pour ce pays (HTTP 404)."""


class CatalogClient:
    """
    Client HTTP centralisé pour les catalogues.
    - Retries optionnels (désactivés par défaut : une seule tentative).
    - Journalise chaque requête avec un identifiant de corrélation.
    """

    def __init__(
        self,
        base_url: str,
        geogrid_base_url: str,
        flag_url_template: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = (5.0, 20.0),
        retries: int = 0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.geogrid_base_url = geogrid_base_url.rstrip("/")
        self.flag_url_template = flag_url_template
        self.timeout = timeout
        self.session = session or self._build_session(retries)

    @staticmethod
    def _build_session(retries: int) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=retries,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET"}),
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def _get_json(self, url: str) -> Any:
        request_id = f"fetch-{uuid4().hex}"
        try:
            logger.debug("Catalog request start", extra={"source_url": url, "request_id": request_id})
            response = self.session.get(url, timeout=self.timeout)
            if response.status_code == 404 and url.startswith(self.geogrid_base_url):
                raise GeogridNotFound(f"No geogrid facts at {url}")
            response.raise_for_status()
        except requests.Timeout as exc:
            logger.warning("Catalog request timeout", extra={"source_url": url, "request_id": request_id})
            raise DataSourceError("Catalog request timed out") from exc
        except requests.RequestException as exc:
            logger.error(
                "Catalog request failed",
                exc_info=True,
                extra={"source_url": url, "request_id": request_id},
            )
            raise DataSourceError("Catalog request failed") from exc

        try:
            data = response.json()
        except ValueError as exc:
            logger.error(
                "Invalid JSON payload from catalog",
                exc_info=True,
                extra={"source_url": url, "request_id": request_id},
            )
            raise DataSourceError("Invalid JSON payload from catalog") from exc
        logger.debug("Catalog request success", extra={"source_url": url, "request_id": request_id})
        return data

    # -----------------------------
    # URLs
    # -----------------------------
    def countries_url(self) -> str:
        return f"{self.base_url}/countries.json"

    def country_url(self, code: str) -> str:
        return f"{self.base_url}/countries/{code.lower()}.json"

    def cities_url(self) -> str:
        return f"{self.base_url}/cities.json"

    def products_url(self) -> str:
        return f"{self.base_url}/products.json"

    def languages_url(self) -> str:
        return f"{self.base_url}/languages.json"

    def geogrid_url(self, code: str) -> str:
        return f"{self.geogrid_base_url}/{code.lower()}.json"

    def flag_url(self, code: str) -> str:
        return self.flag_url_template.format(code=code.lower())

    # -----------------------------
    # Lectures brutes (lèvent DataSourceError)
    # -----------------------------
    def get_list(self, url: str) -> List[Dict[str, Any]]:
        data = self._get_json(url)
        return data if isinstance(data, list) else []

    def get_object(self, url: str) -> Dict[str, Any]:
        data = self._get_json(url)
        return data if isinstance(data, dict) else {}

    # -----------------------------
    # Lectures tolérantes (vide en cas d'échec)
    # -----------------------------
    def _safe(self, label: str, fn, *args):
        try:
            return fn(*args)
        except GeogridNotFound:
            logger.info("No geogrid facts for country", extra={"source": label, "source_args": args})
        except DataSourceError:
            logger.error("Data source unavailable, continuing without it", extra={"source": label})
        return None

    def fetch_countries(self) -> List[Dict[str, Any]]:
        """Catalogue `{name, code}` (entrées sans nom ou sans code ignorées)."""
        items = self._safe("countries", self.get_list, self.countries_url()) or []
        return [item for item in items if isinstance(item, dict) and item.get("name") and item.get("code")]

    def fetch_country(self, code: str) -> Dict[str, Any]:
        return self._safe("country", self.get_object, self.country_url(code)) or {}

    def fetch_cities(self) -> List[Dict[str, Any]]:
        return self._safe("cities", self.get_list, self.cities_url()) or []

    def fetch_products(self) -> List[Dict[str, Any]]:
        return self._safe("products", self.get_list, self.products_url()) or []

    def fetch_languages(self) -> List[Dict[str, Any]]:
        return self._safe("languages", self.get_list, self.languages_url()) or []

    def fetch_geogrid(self, code: str) -> Dict[str, Any]:
        return self._safe("geogrid", self.get_object, self.geogrid_url(code)) or {}


def build_client() -> CatalogClient:
    return CatalogClient(
        settings.DATA_BASE_URL,
        settings.GEOGRID_BASE_URL,
        settings.FLAG_URL_TEMPLATE,
        timeout=tuple(settings.FETCH_TIMEOUT),
        retries=settings.FETCH_RETRIES,
    )


CLIENT = build_client()
