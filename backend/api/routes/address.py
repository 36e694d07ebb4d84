"""
Address lookup API routes.

Each request drives a fresh AutocompleteSession; the provider loader behind
it is shared process-wide.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from domain.models import PlaceSuggestion
from services.autocomplete_session import AutocompleteSession

router = APIRouter()
logger = logging.getLogger(__name__)


class SuggestionModel(BaseModel):
    id: str
    label: str
    has_detail: bool = False


class SuggestionsResponse(BaseModel):
    query: str
    suggestions: List[SuggestionModel]
    advisory: Optional[str] = None
    source: Optional[str] = None


class ResolveRequest(BaseModel):
    id: str
    label: str
    has_detail: bool = False


class AddressModel(BaseModel):
    street: str
    city: str
    state: str
    zip: str


class ResolveResponse(BaseModel):
    label: str
    address: AddressModel
    one_line: str
    degraded: bool
    advisory: Optional[str] = None


def _new_session() -> AutocompleteSession:
    return AutocompleteSession()


@router.get("/suggestions", response_model=SuggestionsResponse)
async def get_suggestions(q: str = Query("", max_length=256)):
    """Suggestions for a partial address; fewer than 3 characters yields none."""
    session = _new_session()
    suggestions = await session.handle_input(q)
    return SuggestionsResponse(
        query=q,
        suggestions=[SuggestionModel(**s.to_dict()) for s in suggestions],
        advisory=session.advisory,
        source=session.last_source.value if session.last_source else None,
    )


@router.post("/resolve", response_model=ResolveResponse)
async def resolve_suggestion(payload: ResolveRequest):
    """Resolve a chosen suggestion into a canonical address. Never fails on provider errors."""
    session = _new_session()
    suggestion = PlaceSuggestion(id=payload.id, label=payload.label, has_detail=payload.has_detail)
    address = await session.select(suggestion)
    logger.debug("Resolved %s to %s", payload.id, address.one_line)
    return ResolveResponse(
        label=session.current_value,
        address=AddressModel(**address.to_dict()),
        one_line=address.one_line,
        degraded=session.advisory is not None,
        advisory=session.advisory,
    )
