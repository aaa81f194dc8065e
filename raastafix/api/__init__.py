"""REST API for RaastaFix."""
