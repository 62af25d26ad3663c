# storefront/services/numbering.py
import secrets
import time

ORDER_PREFIX = "ORD"
QUOTATION_PREFIX = "QUOT"


def generate_number(prefix: str) -> str:
    """
    Czytelny numer: PREFIX-<epoch ms>-<4 cyfry losowe>, np. ORD-1760870400000-0427.
    Kolizja jest mozliwa - unique w bazie + retry przy insercie.
    """
    timestamp = int(time.time() * 1000)
    return f"{prefix}-{timestamp}-{secrets.randbelow(10_000):04d}"
