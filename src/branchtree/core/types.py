"""
Core type definitions for branchtree.

This module contains type aliases used across the pipeline stages.
"""

# Titles from the first level below the root down to a node
TitlePath = tuple[str, ...]
