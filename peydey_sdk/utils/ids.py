"""Identifier generation"""

import time
import uuid


def _millis() -> int:
    return time.time_ns() // 1_000_000


def generate_id(prefix: str) -> str:
    """Time-based id with a random suffix, e.g. wd_1739701800000_3f9a0c1b2"""
    return f"{prefix}_{_millis()}_{uuid.uuid4().hex[:9]}"


def generate_receipt_number() -> str:
    return f"RCP_{_millis()}_{uuid.uuid4().hex[:6].upper()}"
