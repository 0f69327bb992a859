import bcrypt


class PasswordHelper:
    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password with a fresh bcrypt salt."""
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
        return hashed.decode("utf-8")

    @staticmethod
    def check_password(password: str, hashed_password: str) -> bool:
        """Check a plain password against a stored hash. Missing hashes never match."""
        if not hashed_password:
            return False
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
