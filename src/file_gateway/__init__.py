"""File storage gateway: keeps a blob store and a metadata store in step."""
