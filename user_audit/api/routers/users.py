"""Users API router: reads are public; every mutation runs through the OperationPipeline."""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from user_audit.api.dependencies import (
    get_correlation_id,
    get_credential,
    get_pipeline,
    get_user_queries,
)
from user_audit.api.errors import result_error_response
from user_audit.application.outcomes import OperationKind, OperationResult
from user_audit.application.pipeline import OperationPipeline
from user_audit.application.user_queries import UserQueryService
from user_audit.domain.schemas.user import (
    CreateUserRequest,
    PaginationParams,
    UpdateUserRequest,
    UserResponse,
)
from user_audit.security.identity import ValidatedCredential

router = APIRouter()

Credential = Annotated[Optional[ValidatedCredential], Depends(get_credential)]
Pipeline = Annotated[OperationPipeline, Depends(get_pipeline)]
CorrelationId = Annotated[str, Depends(get_correlation_id)]


def _respond(result: OperationResult, status_code: int = 200) -> Response:
    if not result.ok:
        return result_error_response(result)
    return Response(
        content=result.value.model_dump_json(),
        status_code=status_code,
        media_type="application/json",
    )


@router.get("/", response_model=List[UserResponse])
async def list_users(
    queries: Annotated[UserQueryService, Depends(get_user_queries)],
    page: Annotated[PaginationParams, Query()],
):
    """List users, paginated. Default limit comes from configuration."""
    return await queries.list_users(limit=page.limit, offset=page.offset)


@router.get("/{term}", response_model=UserResponse)
async def find_user(
    term: str,
    queries: Annotated[UserQueryService, Depends(get_user_queries)],
):
    """Find one user by id or email."""
    return await queries.find_user(term)


@router.post("/", response_model=UserResponse, status_code=201)
async def create_user(
    body: CreateUserRequest,
    credential: Credential,
    pipeline: Pipeline,
    correlation_id: CorrelationId,
):
    result = await pipeline.execute(
        OperationKind.CREATE, credential, payload=body, correlation_id=correlation_id
    )
    return _respond(result, status_code=201)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    body: UpdateUserRequest,
    credential: Credential,
    pipeline: Pipeline,
    correlation_id: CorrelationId,
):
    result = await pipeline.execute(
        OperationKind.UPDATE,
        credential,
        target_id=user_id,
        payload=body,
        correlation_id=correlation_id,
    )
    return _respond(result)


@router.delete("/{user_id}", status_code=204)
async def remove_user(
    user_id: str,
    credential: Credential,
    pipeline: Pipeline,
    correlation_id: CorrelationId,
    hard: Annotated[bool, Query()] = False,
):
    """Deactivate the user; with ?hard=true remove the record instead."""
    kind = OperationKind.DELETE if hard else OperationKind.DEACTIVATE
    result = await pipeline.execute(
        kind, credential, target_id=user_id, correlation_id=correlation_id
    )
    if not result.ok:
        return result_error_response(result)
    return Response(status_code=204)
