"""Infrastructure layer for assets app.

This package contains integrations with external systems:
- S3-compatible object storage (signed URLs, server-side hashing)
- Identity provider (bearer tokens, user directory)
- Metadata helpers (MIME policy, filenames, checksums)

Keep infrastructure concerns separate from business logic.
"""
