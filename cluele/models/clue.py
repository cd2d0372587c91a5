"""
Models / clue.py
Rôle:
- Représenter un indice affiché au joueur (texte + image optionnelle).

Notes:
- Les templates peuvent renvoyer une chaîne, un dict `{text, imageUrl}` ou un `Clue`;
  `Clue.coerce` normalise ces trois formes (None si vide / non applicable).
- Deux indices de même texte sont considérés comme identiques (égalité sur `text`).
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Clue(BaseModel):
    """Indice du jour, sérialisé avec l'alias `imageUrl` côté front."""
    text: str
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def coerce(cls, value: Any) -> Optional["Clue"]:
        if value is None:
            return None
        if isinstance(value, Clue):
            clue = value
        elif isinstance(value, str):
            clue = cls(text=value)
        elif isinstance(value, dict) and isinstance(value.get("text"), str):
            clue = cls(text=value["text"], image_url=value.get("imageUrl") or value.get("image_url"))
        else:
            return None
        if not clue.text.strip():
            return None
        return clue

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Clue):
            return self.text == other.text
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.text)
