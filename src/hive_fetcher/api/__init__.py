"""HTTP middleware for Hive searches."""
