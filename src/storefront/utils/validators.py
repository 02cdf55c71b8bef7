import re
from typing import Optional

from email_validator import EmailNotValidError, validate_email


class ValidationUtils:
    """
    Validation helpers shared by request schemas and services

    Features:
    - Email validation and normalization
    - Phone number format checks
    - Password length rules
    """

    PATTERNS = {
        'phone': re.compile(r'^\+?[0-9]{7,15}$'),
        'locale': re.compile(r'^[a-z]{2}(-[A-Z]{2})?$'),
        'country_code': re.compile(r'^[A-Z]{2}$'),
    }

    MIN_PASSWORD_LENGTH = 8
    MAX_PASSWORD_LENGTH = 72  # bcrypt only hashes the first 72 bytes

    @classmethod
    def normalize_email(cls, email: str) -> str:
        """Normalize email address for consistent storage"""
        try:
            validated = validate_email(email, check_deliverability=False)
            return validated.normalized.lower()
        except EmailNotValidError:
            raise ValueError(f"Invalid email address: {email}")

    @classmethod
    def validate_phone_number(cls, phone: str) -> bool:
        """Accept international numbers written with spaces, dashes or parentheses"""
        compact = re.sub(r'[\s\-()]', '', phone)
        return cls.PATTERNS['phone'].match(compact) is not None

    @classmethod
    def password_problem(cls, password: str) -> Optional[str]:
        """Return why a new password is unacceptable, or None"""
        if len(password) < cls.MIN_PASSWORD_LENGTH:
            return f"Password must be at least {cls.MIN_PASSWORD_LENGTH} characters"
        if len(password.encode('utf-8')) > cls.MAX_PASSWORD_LENGTH:
            return f"Password cannot exceed {cls.MAX_PASSWORD_LENGTH} bytes"
        return None
