"""
Interview Coach - AI-Powered Job Interview Practice

Streams interviewer questions token-by-token from a generative model
and drives a multi-turn mock interview ending in written feedback.
"""

__version__ = "0.1.0"
__author__ = "Interview Coach Team"
