"""Business logic layer for assets app.

This package contains the asset lifecycle rules:
- Upload ticket issuance and finalize (integrity verification)
- Sharing and revocation
- Deletion, listing and download URLs

Every state-changing write is guarded by the asset ``version``
(optimistic concurrency), see ``guards``.
"""
