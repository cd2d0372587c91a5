"""
Routes /preferences : lecture / écriture du mode sombre.
"""
from fastapi import APIRouter, Depends

from cluele.models.game import PreferencesPayload
from cluele.services.preferences import PreferencesStore, get_preferences_store

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("", response_model=PreferencesPayload)
def preferences_get(store: PreferencesStore = Depends(get_preferences_store)):
    return store.load()


@router.put("", response_model=PreferencesPayload)
def preferences_put(payload: PreferencesPayload, store: PreferencesStore = Depends(get_preferences_store)):
    return store.set_dark_mode(payload.dark_mode)
