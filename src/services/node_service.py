"""
Node and child association store.

Persistence primitives for nodes and parent-child associations. The
secondary-children service orchestrates these; it never touches the models
directly.
"""
import logging
from typing import Any
from uuid import UUID

from sqlalchemy import and_, delete, exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.qname import CONTENT_MODEL_URI, QName, create_valid_local_name
from models.child_association import ChildAssociation
from models.node import Node
from services.exceptions import (
    AssociationExistsError,
    DuplicateChildNameError,
    InvalidArgumentError,
    NodeNotFoundError,
)

logger = logging.getLogger(__name__)

ROOT_ALIAS = "-root-"

CONTAINS_ASSOC_TYPE = QName(CONTENT_MODEL_URI, "contains")
FOLDER_TYPE = QName(CONTENT_MODEL_URI, "folder")
CONTENT_TYPE = QName(CONTENT_MODEL_URI, "content")

# Properties stored as columns rather than in Node.properties
NAME_PROPERTY = "name"


def parse_node_id(node_id: str | UUID) -> UUID:
    """
    Parse a node id from a request.

    Raises:
        NodeNotFoundError: If the id is not a well-formed UUID.
    """
    if isinstance(node_id, UUID):
        return node_id
    try:
        return UUID(node_id)
    except (TypeError, ValueError) as e:
        raise NodeNotFoundError(node_id) from e


async def get_node(db: AsyncSession, node_id: UUID) -> Node | None:
    """Get a node by id."""
    return await db.get(Node, node_id)


async def resolve_node(db: AsyncSession, node_id: str | UUID) -> Node:
    """
    Resolve a node id to an existing node.

    Raises:
        NodeNotFoundError: If the id is malformed or the node does not exist.
    """
    node = await get_node(db, parse_node_id(node_id))
    if node is None:
        raise NodeNotFoundError(node_id)
    return node


async def get_root_node(db: AsyncSession) -> Node | None:
    """Get the repository root node, if one has been created."""
    result = await db.execute(select(Node).where(Node.is_root.is_(True)).limit(1))
    return result.scalar_one_or_none()


async def lookup_node(db: AsyncSession, node_id: str | UUID) -> Node:
    """
    Resolve a node id or a well-known alias (currently only '-root-').

    Raises:
        NodeNotFoundError: If the alias has no target or the id does not resolve.
    """
    if node_id == ROOT_ALIAS:
        root = await get_root_node(db)
        if root is None:
            raise NodeNotFoundError(node_id)
        return root
    return await resolve_node(db, node_id)


def get_node_property(node: Node, property_name: str) -> Any:
    """Read a node property. 'name' maps to the name column."""
    if property_name == NAME_PROPERTY:
        return node.name
    return (node.properties or {}).get(property_name)


async def get_child_associations(
    db: AsyncSession,
    parent_id: UUID,
    type_qname: QName | None = None,
) -> list[ChildAssociation]:
    """
    Get child associations of a parent, primary and secondary.

    Results are in the store's natural enumeration order (insertion order via
    UUIDv7 ids). Pass type_qname to restrict to one association type.
    """
    stmt = select(ChildAssociation).where(ChildAssociation.parent_id == parent_id)
    if type_qname is not None:
        stmt = stmt.where(ChildAssociation.type_qname == str(type_qname))
    stmt = stmt.order_by(ChildAssociation.id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_primary_parent_association(
    db: AsyncSession,
    child_id: UUID,
) -> ChildAssociation | None:
    """Get the primary parent association of a node (None for the root)."""
    stmt = select(ChildAssociation).where(
        ChildAssociation.child_id == child_id,
        ChildAssociation.is_primary.is_(True),
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_primary_path(db: AsyncSession, node: Node) -> list[Node]:
    """
    Get the ancestors of a node along primary associations, root first.

    The node itself is not included.
    """
    ancestors: list[Node] = []
    seen: set[UUID] = {node.id}
    current_id = node.id
    while True:
        assoc = await get_primary_parent_association(db, current_id)
        if assoc is None or assoc.parent_id in seen:
            break
        parent = await get_node(db, assoc.parent_id)
        if parent is None:
            break
        ancestors.append(parent)
        seen.add(parent.id)
        current_id = parent.id
    ancestors.reverse()
    return ancestors


async def _association_exists(
    db: AsyncSession,
    parent_id: UUID,
    child_id: UUID,
    type_qname: QName,
) -> bool:
    stmt = select(
        exists().where(
            ChildAssociation.parent_id == parent_id,
            ChildAssociation.child_id == child_id,
            ChildAssociation.type_qname == str(type_qname),
        ),
    )
    return bool(await db.scalar(stmt))


async def _child_name_taken(
    db: AsyncSession,
    parent_id: UUID,
    type_qname: QName,
    qname: QName,
) -> bool:
    stmt = select(
        exists().where(
            and_(
                ChildAssociation.parent_id == parent_id,
                ChildAssociation.type_qname == str(type_qname),
                ChildAssociation.qname == str(qname),
            ),
        ),
    )
    return bool(await db.scalar(stmt))


async def add_child(
    db: AsyncSession,
    parent: Node,
    child: Node,
    type_qname: QName,
    qname: QName,
    *,
    is_primary: bool = False,
) -> ChildAssociation:
    """
    Add a child association from parent to child.

    Secondary by default; is_primary is only used when creating nodes.

    Raises:
        InvalidArgumentError: If parent and child are the same node.
        AssociationExistsError: If parent/child/type is already linked.
        DuplicateChildNameError: If parent already has a child named qname for this type.
    """
    if parent.id == child.id:
        raise InvalidArgumentError(f"Cannot add node as a child of itself: {child.id}")
    if await _association_exists(db, parent.id, child.id, type_qname):
        raise AssociationExistsError(parent.id, child.id, str(type_qname))
    if await _child_name_taken(db, parent.id, type_qname, qname):
        raise DuplicateChildNameError(parent.id, str(type_qname), qname.local_name)

    assoc = ChildAssociation(
        parent_id=parent.id,
        child_id=child.id,
        type_qname=str(type_qname),
        qname=str(qname),
        is_primary=is_primary,
    )
    db.add(assoc)
    try:
        await db.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent insert. Constraint names are not in
        # every driver's message, so fall back to the association check.
        if "uq_child_assoc_parent_type_name" in str(e):
            raise DuplicateChildNameError(
                parent.id, str(type_qname), qname.local_name,
            ) from e
        raise AssociationExistsError(parent.id, child.id, str(type_qname)) from e
    logger.debug(
        "Added %s child association %s -> %s (%s)",
        "primary" if is_primary else "secondary",
        parent.id,
        child.id,
        type_qname,
    )
    return assoc


async def remove_secondary_child_association(
    db: AsyncSession,
    assoc: ChildAssociation,
) -> bool:
    """
    Remove a secondary child association.

    Returns True if the association existed and was removed, False if it was
    already gone.

    Raises:
        InvalidArgumentError: If the association is primary.
    """
    if assoc.is_primary:
        raise InvalidArgumentError(
            f"Cannot remove primary association: {assoc.parent_id} -> {assoc.child_id}",
        )
    stmt = delete(ChildAssociation).where(
        ChildAssociation.id == assoc.id,
        ChildAssociation.is_primary.is_(False),
    )
    result = await db.execute(stmt)
    return result.rowcount > 0


async def create_node(
    db: AsyncSession,
    name: str,
    *,
    parent: Node | None = None,
    node_type: QName = CONTENT_TYPE,
    assoc_type: QName = CONTAINS_ASSOC_TYPE,
    properties: dict[str, Any] | None = None,
    created_by_id: UUID | None = None,
    is_root: bool = False,
) -> Node:
    """
    Create a node and its primary association.

    A node without a parent must be the root. The primary association is named
    after the node, like secondary associations are.

    Raises:
        InvalidArgumentError: If a non-root node has no parent or the name is empty.
        DuplicateChildNameError: If the parent already has a child with this name.
    """
    if parent is None and not is_root:
        raise InvalidArgumentError("A non-root node must have a primary parent")
    try:
        local_name = create_valid_local_name(name)
    except ValueError as e:
        raise InvalidArgumentError(str(e)) from e

    node = Node(
        name=name,
        node_type=str(node_type),
        properties=dict(properties or {}),
        is_root=is_root,
        created_by_id=created_by_id,
        modified_by_id=created_by_id,
    )
    db.add(node)
    await db.flush()

    if parent is not None:
        await add_child(
            db,
            parent,
            node,
            assoc_type,
            QName(CONTENT_MODEL_URI, local_name),
            is_primary=True,
        )

    await db.refresh(node)
    return node
