"""Script Bridge - let language models edit runtime scripts incrementally"""

__version__ = "1.0.0"
