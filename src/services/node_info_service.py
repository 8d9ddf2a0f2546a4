"""Build API representations of nodes."""
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.namespaces import NamespaceRegistry
from core.qname import InvalidQNameError, QName
from models.node import Node
from models.user import User
from schemas.node import NodeResponse, PathElement, PathInfo, UserInfo
from services import node_service

INCLUDE_PROPERTIES = "properties"
INCLUDE_PATH = "path"
INCLUDE_OPTIONS = frozenset({INCLUDE_PROPERTIES, INCLUDE_PATH})


def format_qname(registry: NamespaceRegistry, value: str) -> str:
    """
    Format a stored '{uri}local' QName string for display as 'prefix:local'.

    Falls back to the stored string when no prefix is registered for the URI.
    """
    try:
        return registry.to_prefix_string(QName.from_string(value))
    except InvalidQNameError:
        return value


async def get_user_info(
    db: AsyncSession,
    user_id: UUID | None,
    user_info_map: dict[str, UserInfo],
) -> UserInfo | None:
    """Look up display info for a user, memoized in user_info_map for the current request."""
    if user_id is None:
        return None
    key = str(user_id)
    info = user_info_map.get(key)
    if info is None:
        user = await db.get(User, user_id)
        if user is None:
            return None
        info = UserInfo(id=key, display_name=user.display_name)
        user_info_map[key] = info
    return info


async def get_folder_or_document(
    db: AsyncSession,
    node: Node,
    registry: NamespaceRegistry,
    include: list[str] | None,
    user_info_map: dict[str, UserInfo],
) -> NodeResponse:
    """
    Build the minimal representation of a node, expanded with any requested includes.

    user_info_map is shared across all nodes built for one request so each
    creator/modifier is loaded once.
    """
    include = include or []
    node_type = format_qname(registry, node.node_type)
    primary = await node_service.get_primary_parent_association(db, node.id)

    response = NodeResponse(
        id=str(node.id),
        name=node.name,
        node_type=node_type,
        is_folder=node.node_type == str(node_service.FOLDER_TYPE),
        is_file=node.node_type == str(node_service.CONTENT_TYPE),
        parent_id=str(primary.parent_id) if primary is not None else None,
        created_at=node.created_at,
        modified_at=node.updated_at,
        created_by_user=await get_user_info(db, node.created_by_id, user_info_map),
        modified_by_user=await get_user_info(db, node.modified_by_id, user_info_map),
    )

    if INCLUDE_PROPERTIES in include:
        response.properties = dict(node.properties or {})

    if INCLUDE_PATH in include:
        ancestors = await node_service.get_primary_path(db, node)
        response.path = PathInfo(
            name="/" + "/".join(a.name for a in ancestors),
            is_complete=not ancestors or ancestors[0].is_root,
            elements=[PathElement(id=str(a.id), name=a.name) for a in ancestors],
        )

    return response
