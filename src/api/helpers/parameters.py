"""Query parameter parsing for node relationship endpoints."""
import re

from fastapi import HTTPException

from services.node_info_service import INCLUDE_OPTIONS

# Supported where clause: (assocType='prefix:local'), single or double quotes
WHERE_ASSOC_TYPE_PATTERN = re.compile(
    r"""^\(\s*assocType\s*=\s*(?P<quote>['"])(?P<value>[^'"]*)(?P=quote)\s*\)$""",
)


def parse_where_assoc_type(where: str | None) -> str | None:
    """
    Extract the association type from a where clause.

    Returns None when no where clause was given.

    Raises:
        HTTPException: 400 if the clause is not of the form (assocType='prefix:local').
    """
    if where is None or not where.strip():
        return None
    match = WHERE_ASSOC_TYPE_PATTERN.match(where.strip())
    if match is None:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid where clause: {where}. Expected (assocType='prefix:local')",
        )
    return match.group("value")


def parse_include(include: str | None) -> list[str]:
    """
    Split a comma-separated include parameter, dropping blanks and duplicates.

    Raises:
        HTTPException: 400 if an include option is not supported.
    """
    if not include:
        return []
    result: list[str] = []
    for option in (part.strip() for part in include.split(",")):
        if not option or option in result:
            continue
        if option not in INCLUDE_OPTIONS:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid include: {option}. Supported: {', '.join(sorted(INCLUDE_OPTIONS))}",
            )
        result.append(option)
    return result
