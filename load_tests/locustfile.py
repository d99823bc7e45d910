"""
Main Locust configuration file.

Run with:
    locust -f locustfile.py --host=http://localhost:8000

Or with specific user classes:
    locust -f locustfile.py --host=http://localhost:8000 VotingUser IncognitoRetryUser
"""

from voting_load_test import IncognitoRetryUser, VotingUser  # noqa: F401
