"""Personal task list: stores, ordering engine and console front end."""

__version__ = "0.1.0"
