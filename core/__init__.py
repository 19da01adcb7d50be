"""
Core Building Blocks.

Contains the data models and pure business logic shared by the
services, separated from Azure access and orchestration.

Structure:
    models/: Pure data structures (no business logic)
    logic/: Business logic separated from models
"""

from . import models
from . import logic

__all__ = [
    'models',
    'logic'
]
