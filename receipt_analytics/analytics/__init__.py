"""Aggregation engine: brands, filters, distributions, time series, exclusions, cross-tabs."""
