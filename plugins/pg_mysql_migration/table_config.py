"""
Migration Configuration Module

Runtime settings come from DAG params, with defaults taken from environment
variables:

- SAMPLE_SIZE: rows sampled per table during validation (default 5)
- SAMPLE_TABLE_LIMIT: maximum tables sampled per run (default 5)
- BATCH_SIZE: rows per INSERT batch during data transfer (default 1000)
- EXCLUDE_TABLE_PATTERNS: comma-separated wildcard patterns (default strapi_*)
- REPORT_PATH: where the JSON validation report is written
"""

import json
import os
from typing import Any, Dict, List, Mapping, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_PATTERNS = "strapi_*"
DEFAULT_REPORT_PATH = "reports/validation-report.json"


def parse_positive_int(raw: Any, name: str) -> int:
    """
    Parse a strictly positive integer setting.

    Raises:
        ValueError: If the value is not an integer greater than 0
    """
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got '{raw}'")

    if value <= 0:
        raise ValueError(f"{name} must be greater than 0, got {value}")

    return value


def expand_table_list_param(raw_value) -> List[str]:
    """
    Expand and normalize a table list parameter from various input formats.

    Handles:
    - List of strings: ["users", "orders"]
    - JSON string: '["users", "orders"]'
    - Comma-separated string: "users,orders"
    - List with comma-separated items: ["users,orders"]

    Args:
        raw_value: Raw parameter value from DAG params or environment

    Returns:
        Normalized list of entries
    """
    if raw_value is None:
        return []

    if isinstance(raw_value, str):
        raw_value = raw_value.strip()
        if not raw_value:
            return []

        try:
            parsed = json.loads(raw_value)
            if isinstance(parsed, list):
                raw_value = parsed
            else:
                raw_value = [str(parsed)]
        except json.JSONDecodeError:
            raw_value = [t.strip() for t in raw_value.split(',') if t.strip()]

    if isinstance(raw_value, (list, tuple)):
        expanded = []
        for item in raw_value:
            if isinstance(item, str):
                if ',' in item:
                    expanded.extend([t.strip() for t in item.split(',') if t.strip()])
                elif item.strip():
                    expanded.append(item.strip())
        return expanded

    logger.warning(
        "expand_table_list_param received unsupported type %s; returning empty list.",
        type(raw_value).__name__,
    )
    return []


def get_exclude_patterns(environ: Optional[Mapping[str, str]] = None) -> List[str]:
    env = os.environ if environ is None else environ
    return expand_table_list_param(env.get('EXCLUDE_TABLE_PATTERNS', DEFAULT_EXCLUDE_PATTERNS))


def get_migration_settings(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Read migration and validation settings from the environment.

    Args:
        environ: Mapping to read instead of os.environ

    Returns:
        Dictionary of validated settings

    Raises:
        ValueError: If any numeric setting is invalid
    """
    env = os.environ if environ is None else environ

    settings = {
        'sample_size': parse_positive_int(env.get('SAMPLE_SIZE', '5'), 'SAMPLE_SIZE'),
        'sample_table_limit': parse_positive_int(env.get('SAMPLE_TABLE_LIMIT', '5'), 'SAMPLE_TABLE_LIMIT'),
        'batch_size': parse_positive_int(env.get('BATCH_SIZE', '1000'), 'BATCH_SIZE'),
        'exclude_patterns': get_exclude_patterns(env),
        'report_path': env.get('REPORT_PATH', DEFAULT_REPORT_PATH),
    }
    logger.debug(f"Migration settings: {settings}")
    return settings
