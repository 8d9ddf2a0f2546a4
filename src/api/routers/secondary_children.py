"""
Node secondary children endpoints.

Manages secondary child associations (multi-filing) of a parent node. Primary
children are managed elsewhere: create a node under its primary parent, delete
the node itself, or move it.
"""
from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_namespace_registry, get_settings
from api.helpers.parameters import parse_include, parse_where_assoc_type
from core.config import Settings
from core.namespaces import NamespaceRegistry
from schemas.assoc_child import AssocChild
from schemas.node import NodeListResponse
from services import secondary_children_service
from services.exceptions import (
    AssociationNotFoundError,
    ConstraintViolatedError,
    InvalidArgumentError,
    NodeNotFoundError,
)

router = APIRouter(prefix="/nodes", tags=["secondary-children"])


@router.get(
    "/{parent_id}/secondary-children",
    response_model=NodeListResponse,
)
async def list_secondary_children(
    parent_id: str,
    where: str | None = Query(
        default=None, description="Filter by association type: (assocType='cm:contains')",
    ),
    include: str | None = Query(
        default=None, description="Comma-separated extra fields: properties, path",
    ),
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1),
    db: AsyncSession = Depends(get_async_session),
    registry: NamespaceRegistry = Depends(get_namespace_registry),
    settings: Settings = Depends(get_settings),
) -> NodeListResponse:
    """Return a paged list of secondary child nodes of a parent."""
    assoc_type = parse_where_assoc_type(where)
    include_fields = parse_include(include)
    page_size = min(limit or settings.default_page_size, settings.max_page_size)

    try:
        items, total = await secondary_children_service.list_secondary_children(
            db,
            registry,
            parent_id,
            assoc_type=assoc_type,
            include=include_fields,
            offset=offset,
            limit=page_size,
        )
    except NodeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return NodeListResponse(
        items=items,
        total=total,
        offset=offset,
        limit=page_size,
        has_more=offset + len(items) < total,
    )


@router.post(
    "/{parent_id}/secondary-children",
    response_model=AssocChild | list[AssocChild],
    status_code=201,
)
async def create_secondary_children(
    parent_id: str,
    data: AssocChild | list[AssocChild] = Body(...),
    db: AsyncSession = Depends(get_async_session),
    registry: NamespaceRegistry = Depends(get_namespace_registry),
) -> AssocChild | list[AssocChild]:
    """
    Add one or more secondary child associations.

    Accepts a single association or a list; the response has the same shape.
    """
    assocs = data if isinstance(data, list) else [data]
    try:
        created = await secondary_children_service.create_secondary_children(
            db, registry, parent_id, assocs,
        )
    except NodeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConstraintViolatedError as e:
        raise HTTPException(
            status_code=409,
            detail={
                "message": str(e),
                "error_code": "CONSTRAINT_VIOLATED",
            },
        )

    return created if isinstance(data, list) else created[0]


@router.delete("/{parent_id}/secondary-children/{child_id}", status_code=204)
async def delete_secondary_child(
    parent_id: str,
    child_id: str,
    assoc_type: str | None = Query(
        default=None,
        alias="assocType",
        description="Only remove the association of this type",
    ),
    db: AsyncSession = Depends(get_async_session),
    registry: NamespaceRegistry = Depends(get_namespace_registry),
) -> None:
    """Remove secondary child association(s) between a parent and a child."""
    try:
        await secondary_children_service.delete_secondary_child(
            db, registry, parent_id, child_id, assoc_type,
        )
    except (NodeNotFoundError, AssociationNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
