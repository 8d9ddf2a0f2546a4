"""Namespace prefix registry and the dictionary of known association types."""
from functools import lru_cache

from core.config import get_settings
from core.qname import (
    APPLICATION_MODEL_URI,
    CONTENT_MODEL_URI,
    RENDITION_MODEL_URI,
    SYSTEM_MODEL_URI,
    InvalidQNameError,
    QName,
    split_prefixed,
)

DEFAULT_NAMESPACES: dict[str, str] = {
    "cm": CONTENT_MODEL_URI,
    "sys": SYSTEM_MODEL_URI,
    "app": APPLICATION_MODEL_URI,
    "rn": RENDITION_MODEL_URI,
}

# Child association types that exist out of the box. Extra types are added
# through the ASSOCIATION_TYPES setting.
DEFAULT_ASSOCIATION_TYPES: tuple[str, ...] = (
    "cm:contains",
    "sys:children",
    "cm:subcategories",
    "rn:rendition",
)


class NamespaceRegistry:
    """
    Maps namespace prefixes to URIs and knows which association types exist.

    Used to turn caller-supplied ``prefix:local`` strings into QNames and back.
    """

    def __init__(
        self,
        namespaces: dict[str, str] | None = None,
        association_types: list[str] | tuple[str, ...] | None = None,
    ) -> None:
        self._uri_by_prefix: dict[str, str] = dict(DEFAULT_NAMESPACES)
        if namespaces:
            self._uri_by_prefix.update(namespaces)
        # First registered prefix wins when formatting a URI back to a prefix
        self._prefix_by_uri: dict[str, str] = {}
        for prefix, uri in self._uri_by_prefix.items():
            self._prefix_by_uri.setdefault(uri, prefix)

        self._association_types: set[QName] = set()
        for prefixed in (*DEFAULT_ASSOCIATION_TYPES, *(association_types or ())):
            self._association_types.add(self.resolve(prefixed))

    def resolve(self, prefixed: str | None) -> QName:
        """
        Resolve a ``prefix:local`` string into a QName.

        Raises:
            InvalidQNameError: If the string is malformed or the prefix is unknown.
        """
        prefix, local_name = split_prefixed(prefixed)
        uri = self._uri_by_prefix.get(prefix)
        if uri is None:
            raise InvalidQNameError(prefixed, f"unknown namespace prefix '{prefix}'")
        return QName(uri, local_name)

    def to_prefix_string(self, qname: QName) -> str:
        """
        Format a QName as ``prefix:local``.

        Raises:
            InvalidQNameError: If no prefix is registered for the QName's namespace.
        """
        prefix = self._prefix_by_uri.get(qname.namespace_uri)
        if prefix is None:
            raise InvalidQNameError(str(qname), "no prefix registered for namespace")
        return f"{prefix}:{qname.local_name}"

    def is_association_type(self, qname: QName) -> bool:
        """Return True if qname is a known child association type."""
        return qname in self._association_types


@lru_cache
def get_namespace_registry() -> NamespaceRegistry:
    """Get the cached registry built from application settings."""
    settings = get_settings()
    return NamespaceRegistry(
        namespaces=settings.namespaces,
        association_types=settings.association_types,
    )
