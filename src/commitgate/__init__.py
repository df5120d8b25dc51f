"""commitgate - pre-commit validation gate for staged files."""

__version__ = "0.1.0"
