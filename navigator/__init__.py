"""Brawl Content Navigator: conversational search over gameplay videos"""

__version__ = "1.0.0"
