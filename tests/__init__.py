"""Test configuration for pytest."""

import sys
import os

# Make main.py importable without installing the package
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
