"""Infrastructure adapters: database, repositories and object caches."""
