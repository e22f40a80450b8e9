"""Customer CSV import pipeline for the jewellery retail CRM."""

__version__ = "0.1.0"
