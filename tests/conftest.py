"""
Pytest configuration and shared fixtures
"""

import pytest
import os
import tempfile
import shutil

from mapred_wordcount.common.text import tokenize_line


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files"""
    dirpath = tempfile.mkdtemp()
    yield dirpath
    shutil.rmtree(dirpath)


@pytest.fixture
def sample_text():
    """Sample text for testing"""
    return """The quick brown fox jumps over the lazy dog.
The dog was really lazy.
The fox was very quick and brown.
Quick brown foxes are amazing animals.
Lazy dogs sleep all day."""


@pytest.fixture
def sample_tokens(sample_text):
    """Normalized tokens of sample_text"""
    tokens = []
    for line in sample_text.splitlines():
        tokens.extend(tokenize_line(line))
    return tokens


@pytest.fixture
def sample_input_file(temp_dir, sample_text):
    """Create a sample input file for testing"""
    filepath = os.path.join(temp_dir, 'input.txt')
    with open(filepath, 'w') as f:
        f.write(sample_text)
    return filepath


@pytest.fixture
def scenario_tokens():
    """Six-token buffer with a known tally of {a: 3, b: 2, c: 1}"""
    return ["a", "b", "a", "c", "b", "a"]
