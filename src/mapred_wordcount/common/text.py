"""
Input helpers: read a text file and turn it into normalized word tokens.
"""

import os
import re
import logging
from typing import List

logger = logging.getLogger(__name__)

NON_ALPHANUMERIC = re.compile(r'[^a-zA-Z0-9 ]+')


def clear_string(line: str) -> str:
    """Replace every run of non-alphanumeric characters with a single space."""
    return NON_ALPHANUMERIC.sub(' ', line)


def tokenize_line(line: str) -> List[str]:
    """
    Split a line into lower-cased word tokens.

    Example:
        >>> tokenize_line("Hello, World! hello")
        ['hello', 'world', 'hello']
    """
    return [word.lower() for word in clear_string(line).split()]


def read_tokens(input_path: str) -> List[str]:
    """
    Read a text file line by line into one ordered token buffer

    Args:
        input_path: Path to the text file

    Returns:
        List of normalized tokens in file order

    Raises:
        FileNotFoundError: If the input file doesn't exist
    """
    if not os.path.exists(input_path):
        raise FileNotFoundError(f"Input file not found: {input_path}")

    tokens = []
    with open(input_path, 'r', encoding='utf-8', errors='ignore') as f:
        for line in f:
            tokens.extend(tokenize_line(line))

    logger.info(f"Read {len(tokens)} tokens from {input_path}")
    return tokens
