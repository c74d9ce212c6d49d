"""Loading and caching of site configs for the extraction pipeline."""
