"""b2browse: directory listings for Backblaze B2 buckets."""

__version__ = "0.1.0"
