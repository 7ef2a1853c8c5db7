import threading

from woldecks.auth.store import KIND_ADMIN, KIND_VIEW, MemoryTokenStore, TokenRecord


def _record(key: str, clock, ttl: float = 60, kind: str = KIND_VIEW, post_id="p1") -> TokenRecord:
    now = clock()
    return TokenRecord(
        kind=kind,
        token_hash=key,
        token_salt="salt",
        created_at=now,
        expires_at=now + ttl,
        post_id=post_id,
    )


def test_put_get_delete(store, clock):
    store.put("h1", _record("h1", clock))
    assert store.get("h1").post_id == "p1"
    assert store.delete("h1") is True
    assert store.get("h1") is None
    assert store.delete("h1") is False


def test_expiry_enforced_on_read(store, clock):
    store.put("h1", _record("h1", clock, ttl=10))
    clock.advance(9.999)
    assert store.get("h1") is not None
    clock.advance(0.001)
    assert store.get("h1") is None


def test_expired_record_dropped_on_lookup(store, clock):
    store.put("h1", _record("h1", clock, ttl=10))
    store.put("h2", _record("h2", clock, ttl=10))
    clock.advance(10)
    assert len(store) == 2
    assert store.get("h1") is None
    assert len(store) == 1
    assert store.delete_expired() == 1
    assert len(store) == 0


def test_put_sweeps_expired_records_periodically(clock):
    store = MemoryTokenStore(clock=clock, sweep_interval=60)
    for i in range(5):
        store.put(f"old-{i}", _record(f"old-{i}", clock, ttl=10))
    clock.advance(30)
    store.put("mid", _record("mid", clock, ttl=600))
    # interval not reached yet, expired records are still resident
    assert len(store) == 6
    clock.advance(30)
    store.put("new", _record("new", clock, ttl=600))
    assert len(store) == 2
    assert store.get("mid") is not None
    assert store.get("new") is not None


def test_lookup_by_hash_with_predicate(store, clock):
    store.put("h1", _record("h1", clock, kind=KIND_ADMIN, post_id=None))
    assert store.lookup_by_hash("h1").is_admin
    assert store.lookup_by_hash("h1", lambda r: r.kind == KIND_VIEW) is None
    assert store.lookup_by_hash("missing") is None


def test_delete_where_cascades_by_post(store, clock):
    store.put("a", _record("a", clock, post_id="p1"))
    store.put("b", _record("b", clock, post_id="p1"))
    store.put("c", _record("c", clock, post_id="p2"))
    assert store.delete_where(lambda r: r.post_id == "p1") == 2
    assert store.get("c") is not None
    assert len(store) == 1


def test_empty_key_is_absent(store):
    assert store.get("") is None


def test_concurrent_puts_are_not_lost(clock):
    store = MemoryTokenStore(clock=clock)
    barrier = threading.Barrier(8)

    def worker(n: int) -> None:
        barrier.wait()
        for i in range(200):
            key = f"{n}-{i}"
            store.put(key, _record(key, clock))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(store) == 8 * 200
