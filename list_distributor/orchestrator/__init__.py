"""Workflow orchestration for ingesting uploads and distributing contacts."""

from .service import IngestionService, error_response, success_response

__all__ = ["IngestionService", "error_response", "success_response"]
