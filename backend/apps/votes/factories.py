"""
Factory Boy factories for Votes models.
"""

import factory
from django.utils import timezone
from faker import Faker

from .models import Vote, VoteAttempt

fake = Faker()

CANDIDATES = ["ersin-tatar", "tufan-erhurman", "mehmet-hasguler"]


class VoteFactory(factory.django.DjangoModelFactory):
    """Factory for Vote model."""

    class Meta:
        model = Vote

    candidate = factory.Iterator(CANDIDATES)
    fingerprint = factory.Sequence(lambda n: f"fp_{n:012d}")
    ip_address = factory.Faker("ipv4_public")
    user_agent = factory.Faker("user_agent")
    created_at = factory.LazyFunction(timezone.now)


class VoteAttemptFactory(factory.django.DjangoModelFactory):
    """Factory for VoteAttempt model."""

    class Meta:
        model = VoteAttempt

    timestamp = factory.LazyFunction(timezone.now)
    ip_address = factory.Faker("ipv4_public")
    fingerprint_prefix = factory.LazyFunction(lambda: f"{fake.lexify('fp_???????')}...")
    candidate = factory.Iterator(CANDIDATES)
    success = True
    reason = "vote recorded"
