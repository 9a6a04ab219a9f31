"""
JSON logging utilities that include trace, span and transaction fields.

You can use:

    from observability.logging import get_json_logger

    logger = get_json_logger(__name__)
    logger.info("report generated", extra={"rows": 10})
"""

from .json_logger import JsonFormatter, get_json_logger

__all__ = ["JsonFormatter", "get_json_logger"]
