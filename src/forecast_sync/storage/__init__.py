from .db import initialize_database
from .forecast_store import ForecastStore, StoreError, StoreWriteError
from .state import (
    PreferencesStore,
    StateEntry,
    get_state_entry,
    get_state_value,
    set_state_entry,
)

__all__ = [
    "ForecastStore",
    "PreferencesStore",
    "StateEntry",
    "StoreError",
    "StoreWriteError",
    "get_state_entry",
    "get_state_value",
    "initialize_database",
    "set_state_entry",
]
