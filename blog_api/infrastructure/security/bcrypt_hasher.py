from passlib.context import CryptContext

from ...application.ports.password_hasher import PasswordHasher

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class BcryptPasswordHasher(PasswordHasher):
    def __init__(self, context: CryptContext = pwd_context):
        self.context = context

    def hash(self, password: str) -> str:
        return self.context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return self.context.verify(password, password_hash)
        except (ValueError, TypeError):
            # Unrecognised or corrupt hash
            return False
