"""
Utility functions for the corpus generator.
"""
import os
import random
import re
import string
import time
from typing import Optional

_SIZE_UNITS = {
    '': 1,
    'B': 1,
    'KB': 1024,
    'MB': 1024 ** 2,
    'GB': 1024 ** 3,
    'TB': 1024 ** 4,
}

_SIZE_PATTERN = re.compile(r'^\s*(\d+)\s*([KMGT]?B?)\s*$', re.IGNORECASE)


def parse_size(value: Optional[str]) -> int:
    """
    Parse a human readable size such as '20MB' into bytes.

    Args:
        value: Size string; plain digits are bytes

    Returns:
        Size in bytes, 0 for an empty value

    Raises:
        ValueError: If the size cannot be parsed
    """
    if value is None or not str(value).strip():
        return 0

    match = _SIZE_PATTERN.match(str(value))
    if not match:
        raise ValueError(f"invalid size: {value!r}")

    number, unit = match.groups()
    unit = unit.upper()
    if unit and not unit.endswith('B'):
        unit += 'B'

    return int(number) * _SIZE_UNITS[unit]


def corpus_key(prefix: str, run_id: str, template_type: str) -> str:
    """
    Build the S3 key for a generated corpus.

    Returns:
        Key of the form <prefix>/<run_id>/<timestamp>-<suffix>.<template_type>.ndjson
    """
    timestamp = int(time.time() * 1000)
    random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=8))

    return f"{prefix}/{run_id}/{timestamp}-{random_suffix}.{template_type}.ndjson"


def get_region() -> str:
    """
    Get the current AWS region.

    Returns:
        AWS region name
    """
    region = os.getenv('AWS_REGION')
    if region:
        return region

    return os.getenv('AWS_DEFAULT_REGION', 'us-east-1')


def safe_int(value: Optional[str], default: int = 0) -> int:
    """
    Safely convert a string to an integer.

    Args:
        value: String value to convert
        default: Default value if conversion fails

    Returns:
        Integer value or default
    """
    if value is None:
        return default

    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def get_run_id() -> str:
    """
    Generate a unique run ID for this invocation.

    Returns:
        Unique run identifier
    """
    timestamp = int(time.time() * 1000)
    random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=6))

    return f"run_{timestamp}_{random_suffix}"


def get_function_name() -> str:
    """Get the current Lambda function name, or 'local' outside Lambda."""
    return os.getenv('AWS_LAMBDA_FUNCTION_NAME', 'local')
