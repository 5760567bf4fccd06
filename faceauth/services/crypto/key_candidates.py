"""Base-key candidates for each trust phase."""
from typing import List, Optional

from faceauth.core.exceptions import ConfigurationError
from faceauth.domain.value_objects.authentication import AuthPhase


class KeyCandidateResolver:
    """
    Build the ordered base keys an envelope may have been encrypted with.

    Two schemes exist. Before registration completes the client only knows
    the email, so it uses the temporary key. Once a numeric id exists the
    client switches to the user-specific key, but older clients may still
    send temporary-key envelopes, so authentication tries both, user key
    first.
    """

    def __init__(self, app_secret: str, key_prefix: str) -> None:
        if not app_secret:
            raise ConfigurationError("Application secret must not be empty")
        self._app_secret = app_secret
        self._key_prefix = key_prefix

    def temporary_key(self, email: str) -> str:
        return f"{self._key_prefix}-temp-{email}-{self._app_secret}"

    def user_key(self, user_id: int, email: str) -> str:
        return f"{self._key_prefix}-{user_id}-{email}-{self._app_secret}"

    def resolve_candidates(
        self,
        phase: AuthPhase,
        email: str,
        user_id: Optional[int] = None,
    ) -> List[str]:
        """
        Return candidate base keys in the order they must be tried.

        Args:
            phase: Registration or authentication
            email: Email supplied with the envelope
            user_id: Numeric id, required for the authentication phase

        Returns:
            `[temporary]` for registration, `[user, temporary]` for authentication
        """
        if phase is AuthPhase.REGISTRATION:
            return [self.temporary_key(email)]

        if user_id is None:
            raise ValueError("Authentication candidates need a user id")
        return [self.user_key(user_id, email), self.temporary_key(email)]
