"""
Service layer for secondary child associations (multi-filing).

A secondary association files a node under an additional parent without
changing its primary parent, which alone governs the node's lifecycle. This
service only ever creates and removes secondary associations. Primary children
are created, moved and deleted through the node endpoints, never here.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.namespaces import NamespaceRegistry
from core.qname import CONTENT_MODEL_URI, InvalidQNameError, QName, create_valid_local_name
from schemas.assoc_child import AssocChild
from schemas.node import NodeResponse, UserInfo
from services import node_info_service, node_service
from services.exceptions import (
    AssociationExistsError,
    AssociationNotFoundError,
    ConstraintViolatedError,
    DuplicateChildNameError,
    InvalidArgumentError,
)

logger = logging.getLogger(__name__)

PARAM_ASSOC_TYPE = "assocType"


def resolve_assoc_type(
    registry: NamespaceRegistry,
    assoc_type: str | None,
    *,
    mandatory: bool = True,
) -> QName | None:
    """
    Parse a caller-supplied 'prefix:local' association type.

    Returns None for a missing/empty value when not mandatory.

    Raises:
        InvalidArgumentError: If the value is missing (and mandatory), malformed,
            or not a known association type.
    """
    if assoc_type is None or not assoc_type.strip():
        if mandatory:
            raise InvalidArgumentError(f"Missing {PARAM_ASSOC_TYPE}")
        return None
    try:
        qname = registry.resolve(assoc_type)
    except InvalidQNameError as e:
        raise InvalidArgumentError(f"Invalid {PARAM_ASSOC_TYPE}: {assoc_type}") from e
    if not registry.is_association_type(qname):
        raise InvalidArgumentError(f"Unknown {PARAM_ASSOC_TYPE}: {assoc_type}")
    return qname


async def list_secondary_children(
    db: AsyncSession,
    registry: NamespaceRegistry,
    parent_id: str,
    *,
    assoc_type: str | None = None,
    include: list[str] | None = None,
    offset: int = 0,
    limit: int = 100,
) -> tuple[list[NodeResponse], int]:
    """
    List the secondary children of a parent, optionally for one association type.

    Primary children are never returned. Order is the store's association
    enumeration order. Returns (page, total) where total counts every
    secondary child matching the filter, before paging.

    Raises:
        NodeNotFoundError: If the parent does not exist (aliases like '-root-' allowed).
        InvalidArgumentError: If assoc_type is malformed or unknown.
    """
    parent = await node_service.lookup_node(db, parent_id)
    type_qname = resolve_assoc_type(registry, assoc_type, mandatory=False)

    if type_qname is None:
        assocs = await node_service.get_child_associations(db, parent.id)
    else:
        assocs = await node_service.get_child_associations(db, parent.id, type_qname)

    secondary = [a for a in assocs if not a.is_primary]
    total = len(secondary)

    # Formatted type strings and user display info, memoized for this call only
    type_names: dict[str, str] = {}
    user_info_map: dict[str, UserInfo] = {}

    items: list[NodeResponse] = []
    for assoc in secondary[offset:offset + limit]:
        # child_id is a cascading foreign key, so every association has its node
        child = await node_service.resolve_node(db, assoc.child_id)
        node = await node_info_service.get_folder_or_document(
            db, child, registry, include, user_info_map,
        )
        type_name = type_names.get(assoc.type_qname)
        if type_name is None:
            type_name = node_info_service.format_qname(registry, assoc.type_qname)
            type_names[assoc.type_qname] = type_name
        node.association = AssocChild(
            child_id=str(child.id),
            assoc_type=type_name,
            is_primary=assoc.is_primary,
        )
        items.append(node)

    return items, total


async def create_secondary_children(
    db: AsyncSession,
    registry: NamespaceRegistry,
    parent_id: str,
    assocs: list[AssocChild],
) -> list[AssocChild]:
    """
    Add secondary child associations under a parent, in input order.

    Every association type in the batch is validated before anything is
    written. After that, the first failing item aborts the call; nothing is
    undone here, the request's unit of work decides what is committed.

    The association name is not taken from the caller: it is derived from the
    child's current name in the content model namespace (see
    core.qname.create_valid_local_name).

    Returns the input items unchanged.

    Raises:
        NodeNotFoundError: If the parent or a child does not exist.
        InvalidArgumentError: If an association type is missing, malformed or
            unknown, or a child has no usable name.
        ConstraintViolatedError: If an association already exists or the child's
            name is already used under the parent for that type.
    """
    parent = await node_service.resolve_node(db, parent_id)
    type_qnames = [resolve_assoc_type(registry, a.assoc_type) for a in assocs]

    result: list[AssocChild] = []
    for assoc, type_qname in zip(assocs, type_qnames, strict=True):
        child = await node_service.resolve_node(db, assoc.child_id)
        node_name = node_service.get_node_property(child, node_service.NAME_PROPERTY)
        try:
            local_name = create_valid_local_name(node_name)
        except InvalidQNameError as e:
            raise InvalidArgumentError(f"Invalid child name for {child.id}: {e}") from e
        child_qname = QName(CONTENT_MODEL_URI, local_name)

        try:
            await node_service.add_child(db, parent, child, type_qname, child_qname)
        except (AssociationExistsError, DuplicateChildNameError) as e:
            logger.warning(
                "Secondary child create rejected for parent %s: %s", parent.id, e,
            )
            raise ConstraintViolatedError(str(e)) from e

        logger.info(
            "Added secondary child %s under %s (%s)", child.id, parent.id, assoc.assoc_type,
        )
        result.append(assoc)
    return result


async def delete_secondary_child(
    db: AsyncSession,
    registry: NamespaceRegistry,
    parent_id: str,
    child_id: str,
    assoc_type: str | None = None,
) -> None:
    """
    Remove secondary associations between a parent and a child.

    With assoc_type, removes the association of that type. Naming the type of
    the primary association is an error. Without assoc_type, removes every
    secondary association to the child and silently skips the primary one.

    All of the parent's associations are scanned and filtered by child, since
    the store has no combined parent/child/type lookup.

    Raises:
        NodeNotFoundError: If the parent or child does not exist.
        InvalidArgumentError: If assoc_type is malformed or unknown, or it names
            the primary association.
        AssociationNotFoundError: If no secondary association was removed.
    """
    parent = await node_service.resolve_node(db, parent_id)
    child = await node_service.resolve_node(db, child_id)
    type_qname = resolve_assoc_type(registry, assoc_type, mandatory=False)

    found = False
    for assoc in await node_service.get_child_associations(db, parent.id):
        if assoc.child_id != child.id:
            continue

        if type_qname is not None:
            if assoc.type_qname != str(type_qname):
                continue
            if assoc.is_primary:
                logger.warning(
                    "Refused to delete primary association %s,%s,%s",
                    parent_id, assoc_type, child_id,
                )
                raise InvalidArgumentError(
                    "Cannot use secondary-children to delete primary assoc: "
                    f"{parent_id},{assoc_type},{child_id}",
                )
        elif assoc.is_primary:
            continue

        if await node_service.remove_secondary_child_association(db, assoc):
            found = True
            logger.info(
                "Removed secondary child %s from %s (%s)",
                child.id,
                parent.id,
                node_info_service.format_qname(registry, assoc.type_qname),
            )

    if not found:
        raise AssociationNotFoundError(parent_id, assoc_type, child_id)
