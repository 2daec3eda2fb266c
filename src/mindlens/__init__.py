"""
MindLens - Assessment Safety Pipeline

Core backend library for the MindLens wellness platform: PHQ-9 risk
scoring, crisis response dispatch, and encrypted assessment submission.

IMPORTANT: This is a safety-critical healthcare system.
Risk thresholds and escalation behaviour require clinical sign-off.
"""

__version__ = "0.1.0"
__author__ = "MindLens Engineering Team"
