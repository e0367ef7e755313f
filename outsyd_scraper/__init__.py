"""Outsyd event scraper: African event listings -> Supabase ``events``."""

__version__ = "1.0.0"
