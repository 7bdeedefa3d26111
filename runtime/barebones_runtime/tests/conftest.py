"""
Pytest configuration and fixtures for barebones_runtime tests.
"""

import os
import sys

import pytest

# Add grandparent directory to path for imports (to find barebones_runtime package)
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from barebones_runtime.listeners import RecordingListener


MULTIPLY = """
clear X; incr X; incr X; incr X
clear Y; incr Y; incr Y; incr Y; incr Y
clear Z
while X not 0
    clear W
    while Y not 0
        incr Z
        incr W
        decr Y
    end while
    while W not 0
        incr Y
        decr W
    end while
    decr X
end while
"""


@pytest.fixture
def recorder():
    """A listener that keeps every event"""
    return RecordingListener()


@pytest.fixture
def multiply_source():
    """3 * 4 into Z, using nested loops"""
    return MULTIPLY
