"""smsgate - administrative back-office for an SMS gateway.

Invite-gated registration, bearer/API-key authentication and user
administration over a FastAPI HTTP API.
"""

__version__ = "0.1.0"
