import asyncio
import unittest

from verification.interfaces.code_store import CodeEntry
from verification.locks import SubjectLocks
from verification.stores.memory_store import (
    MemoryCodeStore,
    MemoryGuestProfileStore,
    MemoryRateLimiter,
    MemoryTicketStore,
)


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestMemoryCodeStore(unittest.IsolatedAsyncioTestCase):
    async def test_set_overwrites_subject(self):
        store = MemoryCodeStore()
        await store.set(CodeEntry("a@x.io", "111111", expires_at=100.0))
        await store.increment_attempts("a@x.io")
        await store.set(CodeEntry("a@x.io", "222222", expires_at=200.0))

        entry = await store.get("a@x.io")
        self.assertEqual(entry.code, "222222")
        self.assertEqual(entry.attempts, 0)
        self.assertEqual(len(store), 1)

    async def test_get_returns_copy(self):
        store = MemoryCodeStore()
        await store.set(CodeEntry("a@x.io", "111111", expires_at=100.0))
        entry = await store.get("a@x.io")
        entry.attempts = 99
        self.assertEqual((await store.get("a@x.io")).attempts, 0)

    async def test_increment_attempts(self):
        store = MemoryCodeStore()
        self.assertEqual(await store.increment_attempts("missing"), 0)
        await store.set(CodeEntry("a@x.io", "111111", expires_at=100.0))
        self.assertEqual(await store.increment_attempts("a@x.io"), 1)
        self.assertEqual(await store.increment_attempts("a@x.io"), 2)

    async def test_prune_expired(self):
        store = MemoryCodeStore()
        await store.set(CodeEntry("old@x.io", "111111", expires_at=50.0))
        await store.set(CodeEntry("edge@x.io", "222222", expires_at=100.0))
        await store.set(CodeEntry("new@x.io", "333333", expires_at=150.0))

        self.assertEqual(await store.prune_expired(100.0), 2)
        self.assertIsNone(await store.get("old@x.io"))
        self.assertIsNone(await store.get("edge@x.io"))
        self.assertIsNotNone(await store.get("new@x.io"))


class TestMemoryRateLimiter(unittest.IsolatedAsyncioTestCase):
    async def test_fixed_window(self):
        clock = FakeClock()
        limiter = MemoryRateLimiter(clock=clock)

        for expected in range(1, 4):
            decision = await limiter.hit("client", limit=3, window_seconds=300)
            self.assertTrue(decision.allowed)
            self.assertEqual(decision.count, expected)

        clock.now += 100
        denied = await limiter.hit("client", limit=3, window_seconds=300)
        self.assertFalse(denied.allowed)
        self.assertEqual(denied.retry_after, 200)

        # Still counted against the same window, not sliding.
        clock.now += 199.5
        self.assertFalse((await limiter.hit("client", limit=3, window_seconds=300)).allowed)

        clock.now += 0.5
        reset = await limiter.hit("client", limit=3, window_seconds=300)
        self.assertTrue(reset.allowed)
        self.assertEqual(reset.count, 1)

    async def test_keys_are_independent(self):
        limiter = MemoryRateLimiter(clock=FakeClock())
        self.assertTrue((await limiter.hit("a", limit=1, window_seconds=60)).allowed)
        self.assertFalse((await limiter.hit("a", limit=1, window_seconds=60)).allowed)
        self.assertTrue((await limiter.hit("b", limit=1, window_seconds=60)).allowed)

    async def test_elapsed_buckets_are_pruned(self):
        clock = FakeClock()
        limiter = MemoryRateLimiter(clock=clock)
        for i in range(limiter.PRUNE_THRESHOLD + 1):
            await limiter.hit(f"client-{i}", limit=1, window_seconds=10)
        clock.now += 10
        await limiter.hit("fresh", limit=1, window_seconds=10)
        self.assertEqual(len(limiter), 1)


class TestMemoryTicketStore(unittest.IsolatedAsyncioTestCase):
    async def test_save_get_delete(self):
        store = MemoryTicketStore()
        await store.save("t1", "Guest@Gmail.com", 500.0)
        self.assertEqual(await store.get("t1"), {"email": "guest@gmail.com", "expires_at": 500.0})
        await store.delete("t1")
        self.assertIsNone(await store.get("t1"))

    async def test_prune_expired(self):
        store = MemoryTicketStore()
        for i in range(1000):
            await store.save(f"old{i}", "guest@gmail.com", 500.0)
        await store.save("fresh", "guest@gmail.com", 20_000.0)

        self.assertEqual(await store.prune_expired(10_500.0), 1000)
        self.assertEqual(len(store), 1)
        self.assertIsNotNone(await store.get("fresh"))


class TestMemoryGuestProfileStore(unittest.IsolatedAsyncioTestCase):
    async def test_create_and_lookup(self):
        store = MemoryGuestProfileStore()
        profile = await store.create_profile({"personal_email": "Guest@Gmail.com"})
        self.assertEqual(profile["personal_email"], "guest@gmail.com")
        self.assertTrue(profile["inviteable"])
        self.assertFalse(profile["listed_public"])
        self.assertEqual((await store.get_by_email("GUEST@gmail.com"))["id"], profile["id"])
        self.assertEqual((await store.get_by_id(profile["id"]))["personal_email"], "guest@gmail.com")

    async def test_duplicate_email_rejected(self):
        store = MemoryGuestProfileStore()
        await store.create_profile({"personal_email": "guest@gmail.com"})
        with self.assertRaises(ValueError):
            await store.create_profile({"personal_email": "GUEST@gmail.com"})

    async def test_update_missing_profile(self):
        with self.assertRaises(ValueError):
            await MemoryGuestProfileStore().update_profile("nope", {"display_name": "x"})


class TestSubjectLocks(unittest.IsolatedAsyncioTestCase):
    async def test_serializes_same_key_and_cleans_up(self):
        locks = SubjectLocks()
        order = []

        async def worker(name: str):
            async with locks.hold("a@x.io"):
                order.append(f"{name}-in")
                await asyncio.sleep(0)
                order.append(f"{name}-out")

        await asyncio.gather(worker("one"), worker("two"))
        self.assertEqual(order, ["one-in", "one-out", "two-in", "two-out"])
        self.assertEqual(len(locks), 0)


if __name__ == "__main__":
    unittest.main()
