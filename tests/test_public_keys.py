"""Tests for the universe public key registry."""

from __future__ import annotations

import pytest

from errors import CryptoError
from public_keys import EUniverse, PublicKeyRegistry


class TestPublicKeyRegistry:
    def test_builtin_public_universe_key(self):
        registry = PublicKeyRegistry()
        key = registry.get(EUniverse.Public)
        assert key.key_size == 1024
        assert registry.get(EUniverse.Public) is key

    def test_missing_universe(self):
        with pytest.raises(CryptoError):
            PublicKeyRegistry().get(EUniverse.Dev)

    def test_invalid_hex(self):
        with pytest.raises(CryptoError):
            PublicKeyRegistry({EUniverse.Beta: "zz"})

    def test_garbage_der_fails_on_use(self):
        registry = PublicKeyRegistry({EUniverse.Beta: "00112233"})
        assert EUniverse.Beta in registry
        with pytest.raises(CryptoError):
            registry.get(EUniverse.Beta)

    def test_register_overrides(self, private_key):
        registry = PublicKeyRegistry()
        registry.register(EUniverse.Public, private_key.public_key())
        assert registry.get(EUniverse.Public).key_size == private_key.key_size
