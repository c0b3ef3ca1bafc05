"""Caption gateway: AI captions for social platforms plus direct publishing."""

__version__ = "0.1.0"
