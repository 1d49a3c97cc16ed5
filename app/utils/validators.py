"""Custom validators and sanitizers"""

import re
from typing import Optional
import bleach
from email_validator import validate_email, EmailNotValidError

from app.core.config import settings

# Coupon codes are uppercase letters and digits only
COUPON_CODE_PATTERN = re.compile(r"^[A-Z0-9]{3,20}$")
COUPON_PREFIX_PATTERN = re.compile(r"^[A-Z0-9]{1,14}$")

def validate_coupon_code(code: str) -> str:
    """Canonicalize a coupon code and check its format"""
    code = code.strip().upper()
    if not COUPON_CODE_PATTERN.match(code):
        raise ValueError(
            "Coupon code must be 3-20 characters and contain only letters and numbers"
        )
    return code

def validate_coupon_prefix(prefix: str) -> str:
    prefix = prefix.strip().upper()
    if not COUPON_PREFIX_PATTERN.match(prefix):
        raise ValueError(
            "Code prefix must be 1-14 characters and contain only letters and numbers"
        )
    return prefix

def validate_email_address(email: str) -> str:
    """Validate email format and return the normalized, lowercased address"""
    try:
        result = validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(str(e))
    return result.normalized.lower()

def sanitize_html(html: str, allowed_tags: Optional[list] = None) -> str:
    """Strip markup that is not explicitly allowed"""
    allowed_tags = allowed_tags or ["b", "i", "em", "strong", "p", "br", "ul", "ol", "li"]
    return bleach.clean(html, tags=allowed_tags, strip=True)

def normalize_text(text: str) -> str:
    """Normalize text input"""
    # Remove extra whitespace
    text = " ".join(text.split())

    # Remove zero-width characters
    text = re.sub(r'[\u200b\u200c\u200d\ufeff]', '', text)

    return text.strip()

def validate_password(password: str) -> str:
    """Validate password length"""
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long")
    if len(password.encode("utf-8")) > 72:
        raise ValueError("Password cannot exceed 72 bytes")
    return password
