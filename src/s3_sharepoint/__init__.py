"""S3-compatible read API over a SharePoint document library."""

__version__ = "0.1.0"
