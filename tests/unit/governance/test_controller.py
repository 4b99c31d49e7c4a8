"""Tests for the governance controller and request state machine."""

import pytest

from ammkernel.constants import ZERO_ADDRESS
from ammkernel.errors import Forbidden, RequestAlreadyConsumed, UnknownRequest, ZeroAddress
from ammkernel.governance import RequestState, RouterChangeRequest

SOME_ROUTER = "0xcafecafecafecafecafecafecafecafecafecafe"


def make_request() -> RouterChangeRequest:
    return RouterChangeRequest(
        id=1, proposed_router=SOME_ROUTER, proposer=SOME_ROUTER, created_at=5
    )


class TestRouterChangeRequest:
    def test_consume_returns_new_value(self):
        request = make_request()

        consumed = request.consume(10)

        assert request.state is RequestState.PENDING
        assert consumed.state is RequestState.CONSUMED
        assert consumed.consumed_at == 10
        assert consumed.proposed_router == SOME_ROUTER

    def test_consume_twice_raises(self):
        request = make_request()
        with pytest.raises(RequestAlreadyConsumed):
            request.consume(10).consume(11)


class TestRequests:
    def test_ids_are_dense(self, kernel, owner):
        assert kernel.governance.request_count == 1

        assert kernel.governance.new_router_change_request(owner, SOME_ROUTER) == 2
        assert kernel.governance.new_router_change_request(owner, SOME_ROUTER) == 3
        assert kernel.governance.request_count == 3

    def test_request_is_recorded_pending(self, kernel, owner):
        request_id = kernel.governance.new_router_change_request(owner, SOME_ROUTER)

        request = kernel.governance.get_request(request_id)
        assert request.proposed_router == SOME_ROUTER
        assert request.proposer == owner
        assert request.state is RequestState.PENDING
        event = kernel.ledger.events_named("RouterRotationRequested")[-1]
        assert event.args["request_id"] == request_id

    def test_zero_router_rejected(self, kernel, owner):
        with pytest.raises(ZeroAddress):
            kernel.governance.new_router_change_request(owner, ZERO_ADDRESS)

    def test_out_of_range_lookup(self, kernel):
        for request_id in (0, 2, -1):
            with pytest.raises(UnknownRequest):
                kernel.governance.get_request(request_id)


class TestProposers:
    def test_non_proposer_forbidden(self, kernel, trader):
        with pytest.raises(Forbidden):
            kernel.governance.new_router_change_request(trader, SOME_ROUTER)

    def test_owner_can_add_and_remove(self, kernel, owner, trader):
        kernel.governance.add_proposer(owner, trader)
        assert kernel.governance.new_router_change_request(trader, SOME_ROUTER) == 2

        kernel.governance.remove_proposer(owner, trader)
        assert not kernel.governance.is_proposer(trader)
        with pytest.raises(Forbidden):
            kernel.governance.new_router_change_request(trader, SOME_ROUTER)

    def test_only_owner_manages_proposers(self, kernel, trader):
        with pytest.raises(Forbidden):
            kernel.governance.add_proposer(trader, trader)
        with pytest.raises(Forbidden):
            kernel.governance.remove_proposer(trader, kernel.governance.owner)


class TestRecordConsumption:
    def test_only_registry(self, kernel, owner):
        request_id = kernel.governance.new_router_change_request(owner, SOME_ROUTER)
        consumed = kernel.governance.get_request(request_id).consume(kernel.ledger.timestamp)

        with pytest.raises(Forbidden):
            kernel.governance.record_consumption(owner, consumed)

    def test_pending_value_rejected(self, kernel, owner):
        request_id = kernel.governance.new_router_change_request(owner, SOME_ROUTER)
        pending = kernel.governance.get_request(request_id)

        with pytest.raises(ValueError):
            kernel.governance.record_consumption(kernel.registry.address, pending)
