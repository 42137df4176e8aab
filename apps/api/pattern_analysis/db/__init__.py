"""Database layer: declarative base, models, enums and session."""
