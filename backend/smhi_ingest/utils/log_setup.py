"""
Logging setup shared by the entrypoints (FastAPI app and serverless handler).
"""

import logging
import sys


def setup_logging(level: str = "INFO"):
    """Configure the root logger once. Safe to call more than once."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='[%(asctime)s] %(levelname)s %(name)s: %(message)s',
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stderr)]
    )
