"""
Tests for bit-flag roles.

Covers:
- Mask construction from flags and role names
- any/all membership checks
- Decoding masks back to names in declaration order
- Names-to-mask round trips over every combination of site flags
"""

from __future__ import annotations

import pytest

from dashboard_api.core.roles import (
    SiteUserRole,
    UserRole,
    has_all_roles,
    has_any_role,
    mask_from_role_keys,
    mask_from_roles,
    roles_from_mask,
    site_user_roles_from_mask,
)


class TestMasks:
    def test_flag_values_are_stable(self):
        assert [role.value for role in SiteUserRole] == [1, 2, 4, 8, 16, 32]
        assert UserRole.admin == 1

    def test_mask_from_roles(self):
        assert mask_from_roles([SiteUserRole.owner, SiteUserRole.payment]) == 24
        assert mask_from_roles([]) == 0

    def test_mask_from_role_keys_ignores_unknown(self):
        assert mask_from_role_keys(["reporting", "video", "janitor"]) == 6


class TestMembership:
    def test_any_role(self):
        mask = mask_from_roles([SiteUserRole.reporting])
        assert has_any_role(mask, [SiteUserRole.owner, SiteUserRole.reporting])
        assert not has_any_role(mask, [SiteUserRole.owner])

    def test_any_role_with_empty_list_matches(self):
        assert has_any_role(0, [])

    def test_all_roles(self):
        mask = mask_from_roles([SiteUserRole.owner, SiteUserRole.video])
        assert has_all_roles(mask, [SiteUserRole.owner, SiteUserRole.video])
        assert not has_all_roles(mask, [SiteUserRole.owner, SiteUserRole.payment])

    def test_none_mask_has_nothing(self):
        assert not has_any_role(None, [SiteUserRole.owner])


class TestDecoding:
    def test_names_in_declaration_order(self):
        mask = mask_from_roles([SiteUserRole.owner, SiteUserRole.ad_settings])
        assert site_user_roles_from_mask(mask) == ["ad_settings", "owner"]

    def test_empty_masks(self):
        assert site_user_roles_from_mask(0) == []
        assert site_user_roles_from_mask(None) == []
        assert roles_from_mask(None, UserRole) == []

    def test_user_roles(self):
        assert roles_from_mask(1, UserRole) == ["admin"]


class TestRoundTrip:
    @pytest.mark.parametrize("mask", range(64))
    def test_names_rebuild_the_mask(self, mask):
        assert mask_from_role_keys(site_user_roles_from_mask(mask)) == mask

    @pytest.mark.parametrize("mask", range(64))
    def test_unknown_bits_are_dropped(self, mask):
        assert mask_from_role_keys(site_user_roles_from_mask(mask | 64)) == mask
