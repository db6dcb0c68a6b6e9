"""Core module - Tempest UDP ingest.

Structure:
- transport/   → UDP reception and JSON reading
- validation/  → Raw message schemas
- adapters/    → Raw → domain decoding
- domain/      → Decoded messages and derived physics
- pipeline/    → Message pump feeding the sinks
- monitoring/  → Processing statistics
"""
