"""API key generator for private collection routes."""

import secrets
import string


class ApiKeyGenerator:
    """Generate and compare route API keys.

    Keys look like ``ak_`` followed by random ASCII letters and digits.
    """

    ALPHABET = string.ascii_letters + string.digits
    DEFAULT_PREFIX = "ak_"
    DEFAULT_LENGTH = 32

    @classmethod
    def generate(cls, prefix: str = DEFAULT_PREFIX, length: int = DEFAULT_LENGTH) -> str:
        """Generate a new random API key.

        Args:
            prefix: Fixed prefix identifying the key kind.
            length: Number of random characters after the prefix.

        Returns:
            The plaintext API key.
        """
        return prefix + "".join(secrets.choice(cls.ALPHABET) for _ in range(length))

    @staticmethod
    def matches(expected: str | None, provided: str | None) -> bool:
        """Constant-time comparison; a missing key on either side never matches."""
        if not expected or not provided:
            return False
        return secrets.compare_digest(expected.encode(), provided.encode())
