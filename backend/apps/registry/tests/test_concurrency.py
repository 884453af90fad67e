"""
Parallel registrations against one event never overshoot capacity.

Needs real row locks, so it only runs on PostgreSQL.
"""

import threading
import unittest
from datetime import datetime, timezone

from django.db import connection
from django.test import TransactionTestCase

from apps.events.models import Event, EventRegistration
from apps.events.services import event_registry
from apps.users.models import User
from core.exceptions import AlreadyRegisteredError, CapacityExceededError
from core.principal import Principal

CAPACITY = 3
CALLERS = 10


@unittest.skipUnless(
    connection.vendor == "postgresql", "row-level locking requires PostgreSQL"
)
class ParallelRegistrationTests(TransactionTestCase):
    def setUp(self):
        self.event = Event.objects.create(
            title="Limited workshop",
            event_date=datetime(2030, 9, 1, tzinfo=timezone.utc),
            max_participants=CAPACITY,
        )
        self.principals = [
            Principal.from_user(
                User.objects.create_user(
                    email=f"racer-{i}@example.com",
                    password="testpass123",
                    full_name=f"Racer {i}",
                )
            )
            for i in range(CALLERS)
        ]

    def _race(self, principals):
        outcomes = []
        lock = threading.Lock()
        barrier = threading.Barrier(len(principals))

        def attempt(principal):
            barrier.wait()
            try:
                event_registry.register(self.event.id, principal)
                result = "ok"
            except CapacityExceededError:
                result = "full"
            except AlreadyRegisteredError:
                result = "duplicate"
            finally:
                connection.close()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=attempt, args=(p,)) for p in principals]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        return outcomes

    def test_capacity_never_exceeded(self):
        outcomes = self._race(self.principals)

        self.event.refresh_from_db()
        self.assertEqual(outcomes.count("ok"), CAPACITY)
        self.assertEqual(outcomes.count("full"), CALLERS - CAPACITY)
        self.assertEqual(self.event.current_participants, CAPACITY)
        self.assertEqual(
            EventRegistration.objects.filter(event=self.event).count(), CAPACITY
        )

    def test_same_user_registers_once(self):
        outcomes = self._race([self.principals[0]] * 5)

        self.event.refresh_from_db()
        self.assertEqual(outcomes.count("ok"), 1)
        self.assertEqual(outcomes.count("duplicate"), 4)
        self.assertEqual(self.event.current_participants, 1)
