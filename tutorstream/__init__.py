"""TutorStream: session cookies and signed resource URLs."""

__version__ = "0.1.0"
