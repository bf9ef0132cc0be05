"""
Course reader - progress tracking and bookmarking for paginated e-learning courses.
"""

__version__ = "0.1.0"
