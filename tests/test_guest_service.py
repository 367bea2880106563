import unittest

import bcrypt

from verification.config import VerificationConfig
from verification.exceptions import VerificationException
from verification.security import create_access_token, decode_token
from verification.services.guest_service import GuestService
from verification.stores.memory_store import MemoryGuestProfileStore, MemoryTicketStore


class FakeClock:
    def __init__(self, now: float = 50_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestGuestService(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.config = VerificationConfig(TICKET_TTL_SECONDS=600, JWT_SECRET="test-secret")
        self.clock = FakeClock()
        self.tickets = MemoryTicketStore()
        self.profiles = MemoryGuestProfileStore()
        self.service = GuestService(self.config, self.tickets, self.profiles, clock=self.clock)

    async def test_mint_ticket(self):
        ticket, max_age = await self.service.mint_ticket(" Guest@Gmail.com ")
        self.assertRegex(ticket, r"^[0-9a-f]{32}$")
        self.assertEqual(max_age, 600)
        record = await self.tickets.get(ticket)
        self.assertEqual(record["email"], "guest@gmail.com")
        self.assertEqual(record["expires_at"], self.clock.now + 600)

    async def test_complete_creates_profile_and_token(self):
        ticket, _ = await self.service.mint_ticket("guest@gmail.com")
        result = await self.service.complete(ticket, password="correct horse", display_name=" Dr. Guest ")

        profile = result["profile"]
        self.assertTrue(result["is_new"])
        self.assertEqual(profile["personal_email"], "guest@gmail.com")
        self.assertEqual(profile["display_name"], "Dr. Guest")
        self.assertTrue(bcrypt.checkpw(b"correct horse", profile["hashed_password"].encode("utf-8")))

        claims = decode_token(self.config, result["access_token"])
        self.assertEqual(claims["sub"], "guest@gmail.com")
        self.assertEqual(claims["guest_profile_id"], profile["id"])
        self.assertEqual(claims["role"], "guest")

    async def test_complete_reuses_existing_profile(self):
        first, _ = await self.service.mint_ticket("guest@gmail.com")
        created = (await self.service.complete(first))["profile"]

        second, _ = await self.service.mint_ticket("GUEST@gmail.com")
        result = await self.service.complete(second, display_name="Guest")
        self.assertFalse(result["is_new"])
        self.assertEqual(result["profile"]["id"], created["id"])
        self.assertEqual(result["profile"]["display_name"], "Guest")

    async def test_ticket_is_single_use(self):
        ticket, _ = await self.service.mint_ticket("guest@gmail.com")
        await self.service.complete(ticket)
        with self.assertRaises(VerificationException) as ctx:
            await self.service.complete(ticket)
        self.assertEqual(ctx.exception.reason, "not_found")
        self.assertEqual(ctx.exception.status_code, 404)

    async def test_missing_ticket(self):
        with self.assertRaises(VerificationException) as ctx:
            await self.service.complete(None)
        self.assertEqual(ctx.exception.reason, "no_ticket")
        self.assertEqual(ctx.exception.status_code, 401)

    async def test_expired_ticket_is_consumed(self):
        ticket, _ = await self.service.mint_ticket("guest@gmail.com")
        self.clock.now += 600
        with self.assertRaises(VerificationException) as ctx:
            await self.service.complete(ticket)
        self.assertEqual(ctx.exception.reason, "expired")
        self.assertEqual(ctx.exception.status_code, 410)
        self.assertIsNone(await self.tickets.get(ticket))

    async def test_mint_prunes_expired_tickets(self):
        stale = [(await self.service.mint_ticket(f"guest{i}@gmail.com"))[0] for i in range(50)]
        self.clock.now += 600
        fresh, _ = await self.service.mint_ticket("late@gmail.com")

        self.assertEqual(len(self.tickets), 1)
        self.assertIsNone(await self.tickets.get(stale[0]))
        self.assertIsNotNone(await self.tickets.get(fresh))

    async def test_get_profile_from_access_token(self):
        ticket, _ = await self.service.mint_ticket("guest@gmail.com")
        result = await self.service.complete(ticket, display_name="Guest")

        profile = await self.service.get_profile(result["access_token"])
        self.assertEqual(profile["id"], result["profile"]["id"])
        self.assertEqual(profile["display_name"], "Guest")

    async def test_get_profile_rejections(self):
        cases = [
            (None, "unauthorized", 401),
            ("not-a-jwt", "invalid_token", 401),
            (create_access_token(self.config, "guest@gmail.com", "missing-id"), "not_found", 404),
        ]
        for token, reason, status_code in cases:
            with self.subTest(reason=reason):
                with self.assertRaises(VerificationException) as ctx:
                    await self.service.get_profile(token)
                self.assertEqual(ctx.exception.reason, reason)
                self.assertEqual(ctx.exception.status_code, status_code)


if __name__ == "__main__":
    unittest.main()
