"""
Tests for Vote and VoteAttempt models.
"""

import pytest
from django.db import IntegrityError, transaction

from apps.votes.factories import VoteAttemptFactory, VoteFactory
from apps.votes.models import Vote


@pytest.mark.django_db
class TestVoteModel:
    def test_create_vote(self):
        vote = VoteFactory(candidate="ersin-tatar", fingerprint="fp_abcdefghij", ip_address="8.8.8.8")

        assert vote.id is not None
        assert "ersin-tatar" in str(vote)
        assert Vote.objects.count() == 1

    def test_fingerprint_is_unique(self):
        VoteFactory(fingerprint="fp_abcdefghij", ip_address="8.8.8.8")

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                VoteFactory(fingerprint="fp_abcdefghij", ip_address="1.1.1.1")

        assert Vote.objects.count() == 1

    def test_votes_cannot_be_updated(self):
        vote = VoteFactory(candidate="ersin-tatar")
        vote.candidate = "tufan-erhurman"

        with pytest.raises(ValueError):
            vote.save()

        vote.refresh_from_db()
        assert vote.candidate == "ersin-tatar"

    def test_votes_cannot_be_deleted(self):
        vote = VoteFactory()

        with pytest.raises(ValueError):
            vote.delete()

        assert Vote.objects.filter(id=vote.id).exists()

    def test_ordering_newest_first(self):
        first = VoteFactory()
        second = VoteFactory()

        assert list(Vote.objects.all()) == [second, first]


@pytest.mark.django_db
class TestVoteAttemptModel:
    def test_str(self):
        attempt = VoteAttemptFactory(success=False, ip_address="8.8.8.8", reason="duplicate")
        assert "FAILED" in str(attempt)
        assert "8.8.8.8" in str(attempt)
