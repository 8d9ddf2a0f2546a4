"""
Qualified names (QNames) for node types, association types and association names.

A QName is a namespace URI plus a local name. It has two string forms:

- the full form, ``{http://www.alfresco.org/model/content/1.0}contains``, which is
  what the store persists, and
- the prefixed form, ``cm:contains``, which is what API callers read and write.

Converting between the two needs a NamespaceRegistry (see core.namespaces).
"""
import re
from dataclasses import dataclass

# Local names are capped at this length; longer names are truncated.
MAX_LOCAL_NAME_LENGTH = 100

CONTENT_MODEL_URI = "http://www.alfresco.org/model/content/1.0"
SYSTEM_MODEL_URI = "http://www.alfresco.org/model/system/1.0"
APPLICATION_MODEL_URI = "http://www.alfresco.org/model/application/1.0"
RENDITION_MODEL_URI = "http://www.alfresco.org/model/rendition/1.0"

# Full form: "{uri}local". The URI may be empty.
_FULL_FORM_PATTERN = re.compile(r"^\{([^{}]*)\}([^{}]+)$")

# Prefixed form: "prefix:local". Prefixes follow XML NCName rules loosely.
_PREFIXED_FORM_PATTERN = re.compile(r"^([A-Za-z_][\w.\-]*):([^:{}\s][^:{}]*)$")


class InvalidQNameError(ValueError):
    """Raised when a string cannot be parsed as a QName."""

    def __init__(self, value: str | None, reason: str = "malformed qualified name") -> None:
        self.value = value
        super().__init__(f"{reason}: {value!r}")


@dataclass(frozen=True)
class QName:
    """Namespace-qualified name. Hashable, so it can key per-call caches."""

    namespace_uri: str
    local_name: str

    def __post_init__(self) -> None:
        if not self.local_name:
            raise InvalidQNameError(self.local_name, "local name cannot be empty")

    def __str__(self) -> str:
        return f"{{{self.namespace_uri}}}{self.local_name}"

    @classmethod
    def from_string(cls, value: str) -> "QName":
        """Parse the full ``{uri}local`` form as stored in the database."""
        match = _FULL_FORM_PATTERN.match(value or "")
        if match is None:
            raise InvalidQNameError(value)
        return cls(match.group(1), match.group(2))


def split_prefixed(value: str | None) -> tuple[str, str]:
    """
    Split a ``prefix:local`` string into its prefix and local name.

    Raises:
        InvalidQNameError: If the value is empty or not in prefixed form.
    """
    if value is None or not value.strip():
        raise InvalidQNameError(value, "qualified name cannot be empty")
    match = _PREFIXED_FORM_PATTERN.match(value.strip())
    if match is None:
        raise InvalidQNameError(value)
    return match.group(1), match.group(2)


def create_valid_local_name(name: str | None) -> str:
    """
    Derive a legal QName local name from a node name.

    Secondary associations are named after the child node's *current* name
    (the caller never supplies the association name). The node name is used
    as-is, only truncated to MAX_LOCAL_NAME_LENGTH characters. Whitespace is
    significant: "a.txt" and "a.txt " give different local names.

    Raises:
        InvalidQNameError: If the name is missing or empty.
    """
    if not name:
        raise InvalidQNameError(name, "local name cannot be empty")
    return name[:MAX_LOCAL_NAME_LENGTH]
