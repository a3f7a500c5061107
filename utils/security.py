"""
Recipe Share Security Utilities
Password hashing, password rules and input cleanup
"""

import re
from typing import Any, Dict, Optional

import bcrypt


class SecurityUtils:
    def __init__(self, bcrypt_rounds: int = 12):
        self.password_min_length = 8
        self.password_max_length = 72  # bcrypt input limit
        self.bcrypt_rounds = bcrypt_rounds

        # Password strength patterns
        self.password_patterns = {
            'lowercase': re.compile(r'[a-z]'),
            'uppercase': re.compile(r'[A-Z]'),
            'digit': re.compile(r'\d'),
            'whitespace': re.compile(r'\s'),
        }

        # Common weak passwords
        self.weak_passwords = {
            'password', 'password123', 'password1', '12345678', '123456789',
            'qwerty123', 'letmein1', 'welcome1', 'iloveyou', 'trustno1',
        }

    def validate_password_strength(
        self,
        password: str,
        user_info: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Password strength validation

        Args:
            password: Password to validate
            user_info: Optional user information (username, email) it must not contain

        Returns:
            Dictionary with is_valid flag and error messages
        """
        result = {'is_valid': True, 'errors': []}

        if len(password) < self.password_min_length:
            result['errors'].append(f'Password must be at least {self.password_min_length} characters long')

        if len(password.encode('utf-8')) > self.password_max_length:
            result['errors'].append(f'Password must be no more than {self.password_max_length} bytes long')

        if self.password_patterns['whitespace'].search(password):
            result['errors'].append('Password must not contain whitespace')

        required = ('lowercase', 'uppercase', 'digit')
        if not all(self.password_patterns[name].search(password) for name in required):
            result['errors'].append('Password must contain uppercase, lowercase, and number')

        if password.lower() in self.weak_passwords:
            result['errors'].append('This is a commonly used password')

        if user_info:
            for value in user_info.values():
                if value and len(value) > 2 and value.lower() in password.lower():
                    result['errors'].append('Avoid using personal information in password')
                    break

        result['is_valid'] = not result['errors']
        return result

    def hash_password(self, password: str) -> str:
        """Hash password using bcrypt"""
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
        return hashed.decode('utf-8')

    def verify_password(self, password: str, hashed: str) -> bool:
        """Verify password against bcrypt hash"""
        try:
            return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
        except (ValueError, TypeError):
            return False

    def sanitize_input(self, input_str: str, max_length: int = 4000) -> str:
        """Strip control characters and surrounding whitespace, truncate"""
        if not input_str:
            return ""

        sanitized = input_str[:max_length].replace('\x00', '').replace('\r', '')
        return sanitized.strip()
