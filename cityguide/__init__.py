"""City guide content service: sheet ingestion, held record sets and queries."""

__version__ = "1.0.0"
