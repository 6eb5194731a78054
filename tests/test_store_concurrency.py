"""
Concurrency tests — many threads hitting one store.

These check the invariants that a missing or misplaced lock would break:
counter/edge agreement under interleaved favorites, single-winner
uniqueness races, cascade versus comment races, and the reader/writer
lock's own exclusion guarantees.
"""
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from conduit.errors import ConflictError, NotFoundError
from conduit.models import Article, Comment, Profile, User, UserUpdate
from conduit.rwlock import ReadWriteLock
from conduit.store import InMemoryStore

WORKERS = 16


def _seed_users(store: InMemoryStore, count: int) -> list[str]:
    names = [f"user{i}" for i in range(count)]
    for name in names:
        store.create_user(User(email=f"{name}@x.com", username=name), "h")
    return names


def test_interleaved_favorites_keep_counter_consistent(store: InMemoryStore):
    names = _seed_users(store, 40)
    store.create_article(Article(slug="hot", title="Hot", author=Profile(username="user0")))

    def churn(name: str) -> None:
        rng = random.Random(name)
        for _ in range(50):
            if rng.random() < 0.6:
                store.favorite("hot", name)
            else:
                store.unfavorite("hot", name)

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        list(pool.map(churn, names))

    favorited_by = [n for n in names if store.is_favorite("hot", n)]
    assert store.get_article("hot").favorites_count == len(favorited_by)
    _, total = store.list_articles(favorited=names[0])
    assert total == (1 if names[0] in favorited_by else 0)


def test_concurrent_registration_has_single_winner(store: InMemoryStore):
    barrier = threading.Barrier(WORKERS)

    def register(i: int) -> bool:
        barrier.wait()
        try:
            store.create_user(User(email=f"racer{i}@x.com", username="racer"), "h")
            return True
        except ConflictError:
            return False

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(register, range(WORKERS)))

    assert results.count(True) == 1
    assert store.stats().total_users == 1
    winner = store.get_user_by_username("racer")
    assert store.get_user_by_email(winner.email).username == "racer"


def test_concurrent_slug_claims_have_single_winner(store: InMemoryStore):
    barrier = threading.Barrier(WORKERS)

    def claim(i: int) -> bool:
        barrier.wait()
        try:
            store.create_article(Article(
                slug="same", title="Same", body=str(i), author=Profile(username="x"),
            ))
            return True
        except ConflictError:
            return False

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(claim, range(WORKERS)))

    assert results.count(True) == 1


def test_concurrent_comments_get_distinct_ids(store: InMemoryStore):
    store.create_article(Article(slug="busy", title="Busy", author=Profile(username="x")))

    def comment(i: int) -> int:
        return store.add_comment("busy", Comment(body=str(i), author=Profile(username="x")))

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        ids = list(pool.map(comment, range(200)))

    assert sorted(ids) == list(range(1, 201))
    assert len(store.get_comments("busy")) == 200


def test_delete_racing_comments_leaves_nothing_reachable(store: InMemoryStore):
    store.create_article(Article(slug="doomed", title="Doomed", author=Profile(username="x")))
    def comment(i: int) -> None:
        try:
            store.add_comment("doomed", Comment(body=str(i), author=Profile(username="x")))
        except NotFoundError:
            pass

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        futures = [pool.submit(comment, i) for i in range(100)]
        pool.submit(store.delete_article, "doomed").result()
        for f in futures:
            f.result()

    with pytest.raises(NotFoundError):
        store.get_comments("doomed")
    assert store.stats().total_comments == 0


def test_concurrent_email_swaps_keep_indices_consistent(store: InMemoryStore):
    _seed_users(store, 2)

    def bounce(i: int) -> None:
        old, new = ("user0@x.com", "moved@x.com") if i % 2 == 0 else ("moved@x.com", "user0@x.com")
        try:
            store.update_user(old, UserUpdate(email=new))
        except (NotFoundError, ConflictError):
            pass

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        list(pool.map(bounce, range(200)))

    user = store.get_user_by_username("user0")
    assert user.email in ("user0@x.com", "moved@x.com")
    assert store.get_user_by_email(user.email).username == "user0"
    assert store.get_credential(user.email) == "h"
    assert store.stats().total_users == 2


def test_readers_see_whole_pages_during_writes(store: InMemoryStore):
    for i in range(20):
        store.create_article(Article(slug=f"seed-{i}", title="s", author=Profile(username="x")))
    stop = threading.Event()
    errors = []

    def writer() -> None:
        i = 0
        while not stop.is_set():
            store.create_article(Article(slug=f"w-{i}", title="w", author=Profile(username="x")))
            store.delete_article(f"w-{i}")
            i += 1

    def reader() -> None:
        for _ in range(200):
            articles, total = store.list_articles(limit=100)
            if total not in (20, 21) or len(articles) != total:
                errors.append((total, len(articles)))

    t = threading.Thread(target=writer)
    t.start()
    try:
        with ThreadPoolExecutor(max_workers=4) as pool:
            for f in [pool.submit(reader) for _ in range(4)]:
                f.result()
    finally:
        stop.set()
        t.join()

    assert errors == []


# ---------------------------------------------------------------------------
# ReadWriteLock
# ---------------------------------------------------------------------------

def test_rwlock_allows_concurrent_readers():
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=5)

    def read() -> None:
        with lock.read_locked():
            # All three readers must be inside at once to pass the barrier.
            inside.wait()

    with ThreadPoolExecutor(max_workers=3) as pool:
        futures = [pool.submit(read) for _ in range(3)]
        for f in futures:
            f.result(timeout=10)


def test_rwlock_writer_excludes_readers_and_writers():
    lock = ReadWriteLock()
    state = {"active": 0, "max": 0, "writer_overlap": False}
    guard = threading.Lock()

    def work(write: bool) -> None:
        ctx = lock.write_locked() if write else lock.read_locked()
        with ctx:
            with guard:
                state["active"] += 1
                state["max"] = max(state["max"], state["active"])
                if write and state["active"] > 1:
                    state["writer_overlap"] = True
            time.sleep(0.001)
            with guard:
                if write and state["active"] > 1:
                    state["writer_overlap"] = True
                state["active"] -= 1

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        list(pool.map(work, [i % 3 == 0 for i in range(150)]))

    assert state["writer_overlap"] is False
    assert state["active"] == 0


def test_rwlock_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    lock.acquire_read()
    order = []

    def writer() -> None:
        with lock.write_locked():
            order.append("writer")

    def late_reader() -> None:
        with lock.read_locked():
            order.append("reader")

    w = threading.Thread(target=writer)
    w.start()
    # Give the writer time to start waiting behind the held read lock.
    time.sleep(0.05)
    r = threading.Thread(target=late_reader)
    r.start()
    time.sleep(0.05)
    assert order == []

    lock.release_read()
    w.join(timeout=5)
    r.join(timeout=5)
    assert order == ["writer", "reader"]
