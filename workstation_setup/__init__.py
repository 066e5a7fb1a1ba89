"""Workstation setup (resumable, marker-driven).

Core design goals:
- Ordered catalog of silent installer steps
- Each step runs at most once; a marker records completion
- Stop at the first failure, resume from it on the next run
- Centralized transcript logging
"""

__all__ = []
