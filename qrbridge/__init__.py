"""
QR Bridge — Application Package
=================================

What:  Transcodes small structured records to QR code images and back.

Architecture:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   TranscodingService (Pipelines)    │  ← Orchestration
    ├─────────────────────────────────────┤
    │  Record / Matrix / Image Codecs     │  ← JSON, QR, Pillow adapters
    ├─────────────────────────────────────┤
    │        Schemas (Record model)       │  ← Pydantic
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
