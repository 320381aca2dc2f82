"""
Bit-flag roles.

A site user's ``roles_mask`` is the bitwise OR of zero or more
``SiteUserRole`` flags; a user's own ``roles_mask`` uses ``UserRole``.
The flag values are persisted, so they are listed explicitly and must
never be renumbered.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Iterable, Optional, Type


class SiteUserRole(IntEnum):
    ad_settings = 1
    reporting = 2
    video = 4
    payment = 8
    owner = 16
    post_termination_new_owner = 32


class UserRole(IntEnum):
    admin = 1


def _has_role(mask: Optional[int], role: int) -> bool:
    return ((mask or 0) & role) == role


def has_all_roles(mask: Optional[int], roles: Iterable[int]) -> bool:
    return all(_has_role(mask, role) for role in roles)


def has_any_role(mask: Optional[int], roles: Iterable[int]) -> bool:
    """True if the mask carries any of ``roles``; an empty list always matches."""
    roles = list(roles)
    if not roles:
        return True
    return any(_has_role(mask, role) for role in roles)


def mask_from_roles(roles: Iterable[int]) -> int:
    mask = 0
    for role in roles:
        mask |= role
    return mask


def roles_from_mask(mask: Optional[int], role_enum: Type[IntEnum]) -> list[str]:
    """Role names set in ``mask``, in the enum's declaration order. A missing mask has none."""
    return [member.name for member in role_enum if _has_role(mask, member.value)]


def site_user_roles_from_mask(mask: Optional[int]) -> list[str]:
    return roles_from_mask(mask, SiteUserRole)


def mask_from_role_keys(role_keys: Iterable[str]) -> int:
    """Convert role names to a mask. Unknown names are ignored."""
    return mask_from_roles(
        SiteUserRole[key] for key in role_keys if key in SiteUserRole.__members__
    )
