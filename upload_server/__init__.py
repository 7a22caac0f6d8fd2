"""Date-partitioned file upload server."""
