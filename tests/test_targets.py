"""Tests for targets, the private host cell and needs_private_host."""

import asyncio

import pytest

from screeps_client.errors import PrivateHostPending
from screeps_client.targets import Target, TargetKind
from screeps_client.utils import ResolvedValue, needs_private_host


class TestTarget:
    def test_from_dict_public(self):
        target = Target.from_dict({"type": "mmo", "username": "alice", "token": "abc", "shards": ["shard0"]})

        assert target == Target(TargetKind.PUBLIC, "alice", "abc")
        assert target.is_public

    def test_from_dict_private_without_token(self):
        target = Target.from_dict({"type": "private", "username": "bob", "password": "secret"})

        assert target.kind == TargetKind.PRIVATE
        assert target.username == "bob"
        assert target.token is None
        assert not target.is_public

    def test_from_dict_empty_strings_are_absent(self):
        target = Target.from_dict({"type": "mmo", "username": "", "token": ""})

        assert target.username is None
        assert target.token is None

    @pytest.mark.parametrize("record", [{}, {"type": "season"}, {"type": None}])
    def test_from_dict_unknown_type(self, record):
        with pytest.raises(ValueError):
            Target.from_dict(record)

    def test_with_token_returns_new_target(self):
        target = Target.private("bob")

        updated = target.with_token("tok")

        assert updated.token == "tok"
        assert target.token is None


class TestNeedsPrivateHost:
    def test_no_targets(self):
        assert not needs_private_host([])

    def test_only_public(self):
        assert not needs_private_host([Target.public("a"), Target.public("b")])

    def test_any_private(self):
        assert needs_private_host([Target.public("a"), Target.private("b")])


class TestResolvedValue:
    def test_get_before_set_raises_pending(self):
        cell = ResolvedValue()

        with pytest.raises(PrivateHostPending):
            cell.get()
        assert not cell.is_set()

    def test_first_write_wins(self):
        cell = ResolvedValue()

        assert cell.set("localhost")
        assert not cell.set("172.17.0.1")
        assert cell.get() == "localhost"

    @pytest.mark.asyncio
    async def test_wait_returns_value_once_set(self):
        cell = ResolvedValue()
        waiter = asyncio.ensure_future(cell.wait())
        await asyncio.sleep(0)
        assert not waiter.done()

        cell.set("host.docker.internal")

        assert await asyncio.wait_for(waiter, 1) == "host.docker.internal"

    @pytest.mark.asyncio
    async def test_wait_after_set_returns_immediately(self):
        cell = ResolvedValue()
        cell.set("localhost")

        assert await asyncio.wait_for(cell.wait(), 1) == "localhost"

    @pytest.mark.asyncio
    async def test_fail_wakes_waiters_with_the_error(self):
        cell = ResolvedValue()
        waiter = asyncio.ensure_future(cell.wait())
        await asyncio.sleep(0)

        assert cell.fail(ConnectionError("nobody home"))

        with pytest.raises(ConnectionError):
            await asyncio.wait_for(waiter, 1)
        assert not cell.is_set()
        assert cell.has_failed()
        with pytest.raises(ConnectionError):
            cell.get()

    def test_fail_after_set_is_ignored(self):
        cell = ResolvedValue()
        cell.set("localhost")

        assert not cell.fail(ConnectionError())
        assert cell.get() == "localhost"
        assert not cell.has_failed()

    @pytest.mark.asyncio
    async def test_reset_failure_makes_waiters_wait_again(self):
        cell = ResolvedValue()
        cell.fail(ConnectionError())

        cell.reset_failure()
        waiter = asyncio.ensure_future(cell.wait())
        await asyncio.sleep(0)
        assert not waiter.done()

        cell.set("172.17.0.1")
        assert await asyncio.wait_for(waiter, 1) == "172.17.0.1"

    def test_set_after_fail_stores_the_value(self):
        cell = ResolvedValue()
        cell.fail(ConnectionError())

        assert cell.set("localhost")
        assert cell.get() == "localhost"
        assert not cell.has_failed()
