import base64
import binascii
import hashlib
import hmac
import os


class PasswordHasher:
    """
    PBKDF2-SHA256 hashes stored as a single string:

        pbkdf2_sha256$<iterations>$<b64 salt>$<b64 hash>
    """

    ALGORITHM = "pbkdf2_sha256"
    DEFAULT_ITERATIONS = 600_000
    SALT_BYTES = 16

    def __init__(self, *, iterations: int | None = None) -> None:
        self._iterations = iterations or self.DEFAULT_ITERATIONS

    @staticmethod
    def _derive(password: str, salt: bytes, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)

    def hash_password(self, password: str) -> str:
        if not password:
            raise ValueError("Password must not be empty")

        salt = os.urandom(self.SALT_BYTES)
        dk = self._derive(password, salt, self._iterations)

        return "$".join(
            (
                self.ALGORITHM,
                str(self._iterations),
                base64.b64encode(salt).decode("ascii"),
                base64.b64encode(dk).decode("ascii"),
            )
        )

    def verify_password(self, password: str, encoded: str) -> bool:
        if not password or not encoded:
            return False

        try:
            algo, iterations, salt_b64, hash_b64 = encoded.split("$", 3)
            salt = base64.b64decode(salt_b64.encode("ascii"), validate=True)
            expected = base64.b64decode(hash_b64.encode("ascii"), validate=True)
            rounds = int(iterations)
        except (ValueError, binascii.Error):
            return False

        if algo != self.ALGORITHM or rounds <= 0:
            return False

        return hmac.compare_digest(self._derive(password, salt, rounds), expected)
