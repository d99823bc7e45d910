import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class VotesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.votes"
    label = "votes"

    vote_store = None

    def ready(self):
        """
        Build the vote store selected in settings.

        The store lives on the app config so every request in the process
        shares the same ledger (this matters for the in-memory backend).
        """
        from apps.votes.stores import build_vote_store

        self.vote_store = build_vote_store()
        logger.info(f"VotesConfig: using {self.vote_store.__class__.__name__}")
