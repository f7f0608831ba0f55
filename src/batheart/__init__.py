"""batheart: battery conservation mode daemon."""
