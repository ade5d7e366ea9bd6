"""WorkTime: personal work-session tracker (REST API and client core)."""

__version__ = "1.0.0"
