from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class SecurityUtils:
    """Password hashing for account credentials (bcrypt via passlib)"""

    @staticmethod
    def hash_password(plain_password: str) -> str:
        return pwd_context.hash(plain_password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def reject_unknown_account() -> bool:
        """Spend one hash round for an unknown email so login timing matches"""
        pwd_context.dummy_verify()
        return False
