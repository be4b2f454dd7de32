"""Receipt Analytics — redemption aggregation and brand normalization."""
__version__ = "1.0.0"
