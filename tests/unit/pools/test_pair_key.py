"""Tests for canonical pair keys."""

import pytest

from ammkernel.constants import ZERO_ADDRESS
from ammkernel.errors import IdenticalAddresses, ZeroAddress
from ammkernel.pools import PairKey

LOW = "0x1000000000000000000000000000000000000001"
HIGH = "0xF000000000000000000000000000000000000002"


class TestPairKey:
    def test_of_sorts_by_magnitude(self):
        key = PairKey.of(HIGH, LOW)

        assert key.token0 == LOW
        assert key.token1 == HIGH.lower()
        assert PairKey.of(LOW, HIGH) == key

    def test_direct_construction_enforces_order(self):
        with pytest.raises(ValueError):
            PairKey(HIGH.lower(), LOW)

    def test_identical_tokens_raise(self):
        with pytest.raises(IdenticalAddresses):
            PairKey.of(HIGH, HIGH.lower())

    def test_zero_token_raises(self):
        with pytest.raises(ZeroAddress):
            PairKey.of(ZERO_ADDRESS, LOW)

    def test_contains(self):
        key = PairKey.of(LOW, HIGH)

        assert HIGH in key
        assert LOW.upper().replace("0X", "0x") in key
        assert ZERO_ADDRESS not in key

    def test_usable_as_dict_key(self):
        table = {PairKey.of(LOW, HIGH): "pool"}
        assert table[PairKey.of(HIGH, LOW)] == "pool"
