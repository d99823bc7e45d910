"""
Vote models for OneVote: the append-only ledger and the attempt audit log.
"""

from django.db import models
from django.utils import timezone


class Vote(models.Model):
    """
    An accepted vote.

    Votes are immutable: they are created once and never updated or deleted.
    The unique fingerprint constraint is the one hard guarantee of the system.
    """

    candidate = models.CharField(max_length=64, db_index=True)
    fingerprint = models.CharField(max_length=64, help_text="Browser/device fingerprint")
    ip_address = models.CharField(max_length=64, db_index=True, help_text="Resolved client IP address")
    user_agent = models.TextField(blank=True, help_text="User agent string")
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["fingerprint"], name="unique_vote_fingerprint"),
        ]
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["ip_address", "created_at"], name="vote_ip_created_idx"),
            models.Index(fields=["ip_address", "fingerprint"], name="vote_ip_fingerprint_idx"),
        ]

    def __str__(self):
        return f"Vote for {self.candidate} from {self.ip_address} at {self.created_at}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Votes are immutable once recorded")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Votes cannot be deleted")


class VoteAttempt(models.Model):
    """
    Immutable audit log of ALL vote attempts (success/failure).

    Never read back for voting decisions, only for operator reporting.
    """

    timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    ip_address = models.CharField(max_length=64, blank=True, db_index=True)
    fingerprint_prefix = models.CharField(max_length=16, blank=True)
    candidate = models.CharField(max_length=100, blank=True)
    success = models.BooleanField(default=False, help_text="Whether the vote attempt was accepted")
    reason = models.CharField(max_length=255, blank=True, help_text="Outcome reason")

    class Meta:
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["success", "timestamp"], name="attempt_success_ts_idx"),
        ]

    def __str__(self):
        status = "SUCCESS" if self.success else "FAILED"
        return f"Vote attempt {status} from {self.ip_address} at {self.timestamp}"
