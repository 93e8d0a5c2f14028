"""Thread-safe stack and queue, tagged linked-list nodes, and hash buckets with bucket arrays."""

__version__ = "0.1.0"

__all__ = ["linked_list", "stack", "queue", "bucket", "bucket_array"]