"""Helper library for the ETL SDK."""
