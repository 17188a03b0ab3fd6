import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from conftest import LEASE_JSON
from core.cancellation import CancellationToken
from core.domain.models import Lease, LeaseWatchResult
from core.errors import HTTPStatusError
from core.services.lease_loops import iter_watch_results, renew_before_expiry, sleep_or_cancel


class FakeManager:
    """Doble de `SubnetManager` con respuestas programadas."""

    def __init__(self, watch_results=(), renew_for=timedelta(hours=24)):
        self.watch_results = list(watch_results)
        self.renew_for = renew_for
        self.cursors = []
        self.renewed = []

    async def get_network_config(self, network, *, cancel=None):
        raise NotImplementedError

    async def acquire_lease(self, network, attrs, *, cancel=None):
        raise NotImplementedError

    async def renew_lease(self, network, lease, *, cancel=None):
        self.renewed.append((network, lease.key()))
        renewed = lease.model_copy()
        renewed.expiration = datetime.now(timezone.utc) + self.renew_for
        lease.overwrite(renewed)
        return lease

    async def watch_leases(self, network, cursor=None, *, cancel=None):
        self.cursors.append(cursor)
        if not self.watch_results:
            await cancel.wait()
            raise cancel.error()
        item = self.watch_results.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _result(cursor):
    return LeaseWatchResult(cursor=cursor)


@pytest.mark.asyncio
async def test_watch_loop_resumes_from_previous_cursor():
    manager = FakeManager([_result("1"), _result("2"), _result("3")])
    token = CancellationToken()
    seen = []

    async for result in iter_watch_results(manager, "foo", cursor="0", cancel=token):
        seen.append(result.cursor)
        if len(seen) == 3:
            token.cancel()

    assert seen == ["1", "2", "3"]
    assert manager.cursors == ["0", "1", "2"]


@pytest.mark.asyncio
async def test_watch_loop_ends_quietly_when_cancelled_mid_poll():
    manager = FakeManager([_result("1")])
    token = CancellationToken(timeout=0.05)
    seen = [result.cursor async for result in iter_watch_results(manager, "foo", cancel=token)]
    assert seen == ["1"]
    assert manager.cursors == [None, "1"]


@pytest.mark.asyncio
async def test_watch_loop_propagates_errors():
    failure = HTTPStatusError(500, "Internal Server Error", "boom")
    manager = FakeManager([_result("1"), failure])
    seen = []
    with pytest.raises(HTTPStatusError):
        async for result in iter_watch_results(manager, "foo"):
            seen.append(result.cursor)
    assert seen == ["1"]


@pytest.mark.asyncio
async def test_sleep_or_cancel():
    assert await sleep_or_cancel(0.01, CancellationToken()) is False

    token = CancellationToken()
    asyncio.get_running_loop().call_later(0.01, token.cancel)
    assert await sleep_or_cancel(10, token) is True


@pytest.mark.asyncio
async def test_renew_loop_renews_inside_margin_and_stops_on_cancel():
    manager = FakeManager()
    lease = Lease.model_validate(LEASE_JSON)
    lease.expiration = datetime.now(timezone.utc) + timedelta(seconds=30)
    token = CancellationToken()
    renewed = []

    def on_renewed(current):
        renewed.append(current.expiration)
        token.cancel()

    await asyncio.wait_for(
        renew_before_expiry(manager, "foo", lease, margin=60, cancel=token, on_renewed=on_renewed),
        timeout=1,
    )

    assert manager.renewed == [("foo", "10.1.2.0-24")]
    assert len(renewed) == 1
    assert lease.expires_in() > 3600


@pytest.mark.asyncio
async def test_renew_loop_waits_until_margin():
    manager = FakeManager()
    lease = Lease.model_validate(LEASE_JSON)
    lease.expiration = datetime.now(timezone.utc) + timedelta(hours=2)

    await renew_before_expiry(manager, "foo", lease, margin=60, cancel=CancellationToken(timeout=0.05))

    assert manager.renewed == []
