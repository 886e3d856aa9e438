"""Bannercraft — FastAPI REST API layer.

This package contains the FastAPI application, Pydantic request models,
authentication, prompt compilation, gallery storage and usage tracking.

Modules
-------
main
    FastAPI application with all route handlers, exception handlers and the
    ``main()`` CLI entry point.
auth
    Bearer-token authentication dependencies.
models
    Pydantic models for API request validation.
prompt_builder
    Banner prompt compilation from a validated request.
gallery_store
    Asset storage plus file-backed gallery reconciliation, filtering, and
    pagination helpers.
usage_store
    File-backed log of generation and download events with monthly counts.
"""
