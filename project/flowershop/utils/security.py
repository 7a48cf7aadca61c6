# flowershop/utils/security.py

"""
Password hashing for profiles.
passlib with sha256_crypt, which avoids bcrypt backend issues on Windows.
"""

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["sha256_crypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hashes a password.

    :param password: plain password
    :return: salted hash
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Checks a password against its hash.

    :param plain_password: plain password
    :param hashed_password: hash from the profile row, may be empty
    :return: True when they match
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)
