from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as ModelValidationError

from mediaservices.core.constants import EntitySets
from mediaservices.core.schema import ENTITY_MODELS, RemoteEntity
from mediaservices.infrastructure import InMemoryEntityStore

router = APIRouter()


def _store(request: Request) -> InMemoryEntityStore:
    return request.app.state.store


def _unquote(key: str) -> str:
    return key.replace("''", "'")


def _model(entity_set: str) -> type[RemoteEntity]:
    model = ENTITY_MODELS.get(entity_set)
    if model is None:
        raise HTTPException(status_code=404, detail=f"entity set {entity_set} not found")
    return model


@router.get(f"/{EntitySets.OPERATIONS}('{{operation_id}}')")
async def get_operation(operation_id: str, request: Request) -> dict:
    try:
        operation = _store(request).get_operation(_unquote(operation_id))
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {
        "Id": operation.id,
        "State": operation.state,
        "ErrorCode": operation.error_code,
        "ErrorMessage": operation.error_message,
    }


@router.get("/{entity_set}('{entity_id}')")
async def get_entity(entity_set: str, entity_id: str, request: Request) -> dict:
    _model(entity_set)
    try:
        return _store(request).read(entity_set, _unquote(entity_id))
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/{entity_set}")
async def list_entities(entity_set: str, request: Request) -> dict:
    _model(entity_set)
    return {"value": _store(request).rows(entity_set)}


@router.post("/{entity_set}")
async def create_entity(entity_set: str, payload: dict, request: Request) -> JSONResponse:
    """Insert an entity; long-running sets answer 202 with an operation id header."""
    model = _model(entity_set)
    try:
        entity = model.model_validate(payload)
    except ModelValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    change = _store(request).insert(entity_set, entity)
    body = entity.model_dump(mode="json", by_alias=True, exclude_none=True)
    return JSONResponse(body, status_code=change.status_code, headers=dict(change.headers))
