"""Functions for talking to an S3-compatible blob store, one module per CRUD verb."""
