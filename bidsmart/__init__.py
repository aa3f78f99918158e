"""BidSmart: compare HVAC contractor bids extracted from uploaded PDFs."""

__version__ = "0.1.0"
