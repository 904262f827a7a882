"""
Extra property merging.

Extra properties show up as top-level members of token responses, so
keys that token responses already define are never accepted.
"""

from enum import Enum
from typing import Iterable, List, Optional, Union

from ..api.models import GrantType, Property


RESERVED_KEYS = frozenset([
    "access_token",
    "token_type",
    "expires_in",
    "refresh_token",
    "scope",
    "error",
    "error_description",
    "error_uri",
    "id_token",
])

# Grants whose new properties replace existing ones with the same key.
OVERRIDING_GRANT_TYPES = frozenset([
    GrantType.AUTHORIZATION_CODE.value,
    GrantType.REFRESH_TOKEN.value,
])


def strip_reserved(properties: Optional[Iterable[Property]]) -> List[Property]:
    return [p for p in (properties or []) if p.key not in RESERVED_KEYS]


def merge_properties(
    existing: Optional[Iterable[Property]],
    extra: Optional[Iterable[Property]],
    grant_type: Union[GrantType, str, None] = GrantType.AUTHORIZATION_CODE,
) -> List[Property]:
    """Merge ``extra`` into ``existing``.

    For authorization code and refresh token grants an extra property
    overrides an existing one with the same key; for other grants extra
    properties are appended.
    """
    merged = strip_reserved(existing)
    extra = strip_reserved(extra)

    if isinstance(grant_type, Enum):
        grant_type = grant_type.value

    if grant_type not in OVERRIDING_GRANT_TYPES:
        return merged + extra

    positions = {p.key: index for index, p in enumerate(merged)}
    for prop in extra:
        index = positions.get(prop.key)
        if index is None:
            positions[prop.key] = len(merged)
            merged.append(prop)
        else:
            merged[index] = prop

    return merged
