"""Secure random values for invitation tokens and temporary passwords."""

import secrets
import string

SYMBOLS = "!@#$%^&*"


class TokenService:
    """Generates cryptographically secure tokens and credentials."""

    @staticmethod
    def generate_token(length: int = 32) -> str:
        """Generate a hex token.

        Args:
            length: Number of random bytes. 32 bytes gives 64 hex chars.

        Returns:
            Hexadecimal token string.
        """
        return secrets.token_hex(length)

    @staticmethod
    def generate_temporary_password(length: int = 12) -> str:
        """Generate a temporary password.

        The result always holds at least one uppercase letter, lowercase
        letter, digit and symbol.

        Args:
            length: Password length, at least 4.

        Returns:
            The generated password.
        """
        if length < 4:
            raise ValueError("Temporary password length must be at least 4")
        pools = [string.ascii_uppercase, string.ascii_lowercase, string.digits, SYMBOLS]
        alphabet = "".join(pools)
        chars = [secrets.choice(pool) for pool in pools]
        chars += [secrets.choice(alphabet) for _ in range(length - len(pools))]
        secrets.SystemRandom().shuffle(chars)
        return "".join(chars)


token_service = TokenService()
