"""Tests for SteamID packing and rendering."""

from __future__ import annotations

import pytest

from public_keys import EUniverse
from steam_id import EAccountType, SteamID


class TestSteamID:
    def test_individual_desktop_id(self):
        steam_id = SteamID.create(22202)
        assert int(steam_id) == 76561197960287930
        assert steam_id.format_string() == "76561197960287930"

    def test_components(self):
        steam_id = SteamID(76561197960287930)
        assert steam_id.account_id == 22202
        assert steam_id.instance == 1
        assert steam_id.account_type is EAccountType.Individual
        assert steam_id.universe is EUniverse.Public

    def test_steam3(self):
        assert SteamID.create(22202).steam3() == "[U:1:22202]"
        clan = SteamID.create(4, account_type=EAccountType.Clan, instance=0)
        assert clan.steam3() == "[g:1:4]"

    def test_equality_and_hash(self):
        assert SteamID.create(5) == SteamID(int(SteamID.create(5)))
        assert len({SteamID.create(5), SteamID.create(5)}) == 1

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            SteamID(-1)
        with pytest.raises(ValueError):
            SteamID.create(1 << 32)
        with pytest.raises(ValueError):
            SteamID.create(1, instance=1 << 20)
