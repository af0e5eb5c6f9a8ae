"""First-party event collector."""
