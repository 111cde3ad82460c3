"""Dashboard state and its update function.

The dashboard is modelled as an immutable state value plus a pure
`update(state, action)` function. Every fetch and every search carries the
sequence number it was started with; results arriving for an older request
are ignored so only the latest request is ever applied.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from disaster_risk.config import DEFAULT_CITY, DEFAULT_COUNTRY, DEFAULT_LAT, DEFAULT_LON, MIN_SEARCH_LENGTH
from disaster_risk.hazards.models import RiskAssessment
from disaster_risk.weather.models import DataSource, Location

DEFAULT_LOCATION = Location(name=DEFAULT_CITY, lat=DEFAULT_LAT, lon=DEFAULT_LON, country=DEFAULT_COUNTRY)


class FetchPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    DISPLAYING = "displaying"
    ERROR = "error"


class DataSourceState(str, Enum):
    """What the data source badge shows."""
    IDLE = "idle"
    LOADING = "loading"
    LIVE = "live"
    SIMULATED = "simulated"
    ERROR = "error"


class DashboardState(BaseModel):
    """Everything the dashboard renders."""
    model_config = ConfigDict(frozen=True)

    phase: FetchPhase = FetchPhase.IDLE
    location: Location = DEFAULT_LOCATION
    assessment: Optional[RiskAssessment] = None
    data_source: DataSourceState = DataSourceState.IDLE
    error: Optional[str] = None
    request_id: int = Field(0, description="Sequence number of the latest fetch")
    last_update: Optional[datetime] = None

    search_query: str = ""
    search_results: Tuple[Location, ...] = ()
    search_visible: bool = False
    search_request_id: int = Field(0, description="Sequence number of the latest search")


# Actions

class Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class LocationSelected(Action):
    location: Location


class FetchStarted(Action):
    pass


class FetchSucceeded(Action):
    request_id: int
    assessment: RiskAssessment
    received_at: datetime


class FetchFailed(Action):
    request_id: int
    error: str


class SearchChanged(Action):
    query: str


class SearchResolved(Action):
    request_id: int
    results: Tuple[Location, ...]


class SearchCleared(Action):
    pass


def search_triggers_lookup(query: str) -> bool:
    return len(query.strip()) >= MIN_SEARCH_LENGTH


def update(state: DashboardState, action: Action) -> DashboardState:
    """Apply one action and return the next state."""
    if isinstance(action, LocationSelected):
        return state.model_copy(update={
            "location": action.location,
            "search_query": "",
            "search_results": (),
            "search_visible": False,
            "search_request_id": state.search_request_id + 1,
        })

    if isinstance(action, FetchStarted):
        return state.model_copy(update={
            "phase": FetchPhase.LOADING,
            "data_source": DataSourceState.LOADING,
            "error": None,
            "request_id": state.request_id + 1,
        })

    if isinstance(action, FetchSucceeded):
        if action.request_id != state.request_id:
            return state
        live = action.assessment.data_source is DataSource.LIVE
        return state.model_copy(update={
            "phase": FetchPhase.DISPLAYING,
            "assessment": action.assessment,
            "data_source": DataSourceState.LIVE if live else DataSourceState.SIMULATED,
            "last_update": action.received_at,
        })

    if isinstance(action, FetchFailed):
        if action.request_id != state.request_id:
            return state
        return state.model_copy(update={
            "phase": FetchPhase.ERROR,
            "data_source": DataSourceState.ERROR,
            "error": action.error,
        })

    if isinstance(action, SearchChanged):
        # A new keystroke always invalidates searches still in flight
        next_state = state.model_copy(update={
            "search_query": action.query,
            "search_request_id": state.search_request_id + 1,
        })
        if not search_triggers_lookup(action.query):
            return next_state.model_copy(update={"search_results": (), "search_visible": False})
        return next_state

    if isinstance(action, SearchResolved):
        if action.request_id != state.search_request_id:
            return state
        return state.model_copy(update={
            "search_results": action.results,
            "search_visible": bool(action.results),
        })

    if isinstance(action, SearchCleared):
        return state.model_copy(update={
            "search_query": "",
            "search_results": (),
            "search_visible": False,
            "search_request_id": state.search_request_id + 1,
        })

    raise TypeError(f"Unknown dashboard action: {type(action).__name__}")
