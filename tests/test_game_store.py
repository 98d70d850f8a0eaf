import asyncio

import pytest

from ninetynine.codec import CodecError, dump_state
from ninetynine.errors import ConflictError
from ninetynine.state import PlayCard, StartRound, new_game, start_round
from ninetynine.store import GameStore

pytestmark = pytest.mark.anyio


def seeded_store():
    return GameStore(new_game(["a", "b"]))


def test_accepted_intents_notify_subscribers_in_order():
    store = seeded_store()
    seen = []
    store.subscribe(lambda state: seen.append(state.version))

    store.apply(StartRound(seed=1))
    card = store.state.hands["a"][0]
    store.apply(PlayCard("a", card))
    store.apply(PlayCard("a", card))

    assert seen == [1, 2]
    assert store.state.version == 2


def test_unsubscribe_stops_notifications():
    store = seeded_store()
    seen = []
    unsubscribe = store.subscribe(seen.append)

    unsubscribe()
    store.apply(StartRound(seed=1))

    assert seen == []


async def test_remote_state_replaces_local_by_default():
    store = seeded_store()
    store.apply(StartRound(seed=1))
    remote = start_round(store.state, seed=9).state

    assert await store.receive_remote(remote)
    assert store.state is remote


async def test_failing_strategy_keeps_local_state_and_reports():
    store = seeded_store()
    store.apply(StartRound(seed=1))
    local = store.state
    errors = []
    store.on_error(errors.append)

    async def broken(left, right):
        raise RuntimeError("merge failed")

    store.on_conflict(broken)

    assert not await store.receive_remote(start_round(local, seed=3).state)
    assert store.state is local
    assert len(errors) == 1
    assert isinstance(errors[0], RuntimeError)


async def test_custom_strategy_result_is_applied():
    store = seeded_store()
    store.apply(StartRound(seed=1))
    local = store.state

    async def keep_local(left, right):
        return left

    store.on_conflict(keep_local)

    assert await store.receive_remote(start_round(new_game(["x"]), seed=1).state)
    assert store.state is local


async def test_remote_payload_is_decoded():
    store = seeded_store()
    remote = start_round(new_game(["a", "b"]), seed=4).state

    assert await store.receive_remote_payload(dump_state(remote))
    assert store.state == remote


async def test_undecodable_payload_is_reported():
    store = seeded_store()
    errors = []
    store.on_error(errors.append)

    assert not await store.receive_remote_payload("{not json")
    assert store.state.version == 0
    assert isinstance(errors[0], CodecError)


async def test_late_resolution_cannot_roll_back_a_newer_one():
    store = seeded_store()
    store.apply(StartRound(seed=1))
    older = start_round(store.state, seed=2).state
    newer = start_round(older, seed=3).state

    async def slow_for_older(left, right):
        if right is older:
            await asyncio.sleep(0.01)
        return right

    store.on_conflict(slow_for_older)

    results = await asyncio.gather(store.receive_remote(older), store.receive_remote(newer))

    assert results == [True, True]
    assert store.state is newer
    assert store.state.version == 3


async def test_stale_resolution_is_refused():
    store = seeded_store()
    stale = start_round(new_game(["a", "b"]), seed=2).state
    store.apply(StartRound(seed=1))
    store.apply(StartRound(seed=5))
    local = store.state
    errors = []
    store.on_error(errors.append)

    assert not await store.receive_remote(stale)
    assert store.state is local
    assert isinstance(errors[0], ConflictError)


async def test_intent_during_resolution_is_kept():
    store = seeded_store()
    store.apply(StartRound(seed=1))
    remote = start_round(new_game(["a", "b"]), seed=3).state
    seen_locals = []

    async def keep_local(left, right):
        seen_locals.append(left.version)
        await asyncio.sleep(0.01)
        return left

    store.on_conflict(keep_local)

    task = asyncio.create_task(store.receive_remote(remote))
    await asyncio.sleep(0)
    card = store.state.hands["a"][0]
    assert store.apply(PlayCard("a", card)).accepted

    assert await task
    assert seen_locals == [1, 2]
    assert len(store.state.trick) == 1
    assert store.state.trick.plays[0].card == card


async def test_strategy_returning_garbage_is_reported():
    store = seeded_store()
    store.apply(StartRound(seed=1))
    local = store.state
    errors = []
    store.on_error(errors.append)

    async def bad(left, right):
        return None

    store.on_conflict(bad)

    assert not await store.receive_remote(start_round(local, seed=3).state)
    assert store.state is local
    assert isinstance(errors[0], ConflictError)
