"""S3-compatible object storage for KYC documents."""
