"""Initialization for the scripts package.

This module exports utilities from the scripts submodules for easy import.
"""

from .export_csv import export_stakes_csv, export_scenarios_csv
from .replay import replay, load_operations
