"""Shared exceptions for service layer operations."""


class NodeNotFoundError(Exception):
    """Raised when a node id (or alias) does not resolve to an existing node."""

    def __init__(self, node_id: object) -> None:
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id}")


class InvalidArgumentError(Exception):
    """
    Raised when a request argument is malformed or not allowed.

    Covers unknown/malformed association types, bad where clauses, and attempts
    to remove a primary association through the secondary-children resource.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConstraintViolatedError(Exception):
    """Raised when a create conflicts with an existing association or child name."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class AssociationNotFoundError(Exception):
    """Raised when a delete finds no matching secondary association."""

    def __init__(self, parent_id: str, assoc_type: str | None, child_id: str) -> None:
        self.parent_id = parent_id
        self.assoc_type = assoc_type
        self.child_id = child_id
        if assoc_type is None:
            super().__init__(f"{parent_id},{child_id}")
        else:
            super().__init__(f"{parent_id},{assoc_type},{child_id}")


class AssociationExistsError(Exception):
    """Store-level: the parent/child/type association already exists."""

    def __init__(self, parent_id: object, child_id: object, type_qname: str) -> None:
        self.parent_id = parent_id
        self.child_id = child_id
        self.type_qname = type_qname
        super().__init__(
            f"Association already exists: parent={parent_id}, child={child_id}, type={type_qname}",
        )


class DuplicateChildNameError(Exception):
    """Store-level: the parent already has a child with this name for the association type."""

    def __init__(self, parent_id: object, type_qname: str, child_name: str) -> None:
        self.parent_id = parent_id
        self.type_qname = type_qname
        self.child_name = child_name
        super().__init__(
            f"Duplicate child name not allowed: {child_name} "
            f"(parent={parent_id}, type={type_qname})",
        )
