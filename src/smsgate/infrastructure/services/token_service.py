"""Random secrets for invite codes and API keys."""

import secrets

INVITE_CODE_BYTES = 16


class TokenService:
    """Produces unguessable hex strings from the OS CSPRNG."""

    @staticmethod
    def random_hex(nbytes: int = 32) -> str:
        """Lower-case hex string carrying ``nbytes`` bytes of entropy."""
        return secrets.token_hex(nbytes)

    def generate_invite_code(self) -> str:
        """A 128-bit invite code, e.g. ``9F86D081884C7D659A2FEAA0C55AD015``.

        Codes are upper-cased so they can be read out and typed back without
        ambiguity; lookups upper-case the presented code too.
        """
        return self.random_hex(INVITE_CODE_BYTES).upper()


token_service = TokenService()
