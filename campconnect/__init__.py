"""
CampConnect
A student networking backend.

Screens served:
- Session gate: sign-in / profile setup / main app
- Directory: peer profiles filtered by batch and branch
- Alumni: static alumni records filtered by company and branch
- Q&A: anonymous questions from juniors, attributed answers from seniors
- Chat: per-pair message threads with a live subscription

All data lives in MongoDB.
"""

__version__ = "1.0.0"
