"""MindPal callback ingestion.

- bid_mapper: pure mapping from an extraction payload to bid and child rows
- callback_service: verification, persistence and project completion
"""

from bidsmart.services.callback.callback_service import CallbackService

__all__ = ["CallbackService"]
