"""
Serializers for Votes app.
"""

from rest_framework import serializers


class VoteCastSerializer(serializers.Serializer):
    """
    Serializer for casting a vote.

    Values pass through with their JSON types intact: presence, type,
    format and candidate checks belong to the decision engine so that every
    rejection is audited with its own reason. A number sent as the
    fingerprint must reach the validator as a number, not as its string form.
    """

    candidate = serializers.JSONField(
        required=False,
        allow_null=True,
        help_text="Candidate identifier",
    )
    fingerprint = serializers.JSONField(
        required=False,
        allow_null=True,
        help_text="Device fingerprint generated by the voting page",
    )


class VoteResponseSerializer(serializers.Serializer):
    """Body returned for an accepted vote."""

    success = serializers.BooleanField(default=True)
    message = serializers.CharField()
    timestamp = serializers.DateTimeField()
