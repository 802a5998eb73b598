from passlib.context import CryptContext


class PasswordManager:
    """Bcrypt password hashing."""
    
    def __init__(self):
        self.context = CryptContext(schemes=["bcrypt"], deprecated="auto")
    
    def hash_password(self, password: str) -> str:
        return self.context.hash(password)
    
    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        if not hashed_password:
            return False
        return self.context.verify(plain_password, hashed_password)
    
    def needs_rehash(self, hashed_password: str) -> bool:
        return self.context.needs_update(hashed_password)


# Global password manager instance
password_manager = PasswordManager()
