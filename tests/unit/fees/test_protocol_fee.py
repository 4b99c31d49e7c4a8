"""Tests for the protocol fee split."""

import pytest

from ammkernel.constants import DEFAULT_PROTOCOL_FEE_BPS
from ammkernel.errors import InsufficientInputAmount
from ammkernel.fees import fee_on, gross_up_exact_output, split_exact_input
from tests.helpers import E18


class TestFeeOn:
    def test_default_rate_is_one_in_a_thousand(self):
        assert fee_on(20 * E18, DEFAULT_PROTOCOL_FEE_BPS) == 20 * 10**15

    def test_rounds_down(self):
        assert fee_on(999, 10) == 0
        assert fee_on(1_000, 10) == 1

    def test_zero_rate(self):
        assert fee_on(10**30, 0) == 0


class TestExactInput:
    def test_fee_is_deducted_from_input(self):
        split = split_exact_input(20 * E18, 10)

        assert split.fee == 20 * 10**15
        assert split.pool_amount_in == 19_980 * 10**15
        assert split.gross_amount_in == 20 * E18

    def test_zero_input_raises(self):
        with pytest.raises(InsufficientInputAmount):
            split_exact_input(0, 10)


class TestExactOutput:
    def test_fee_is_charged_on_top(self):
        split = gross_up_exact_output(11_283_851_554_663_991_976, 10)

        assert split.fee == 11_283_851_554_663_991
        assert split.pool_amount_in == 11_283_851_554_663_991_976
        assert split.gross_amount_in == 11_283_851_554_663_991_976 + 11_283_851_554_663_991
