"""Building blocks for a SQL-over-HTTP server: B+ tree id index, table locks, error codes and HTTP/1.1 handling."""

__version__ = "0.1.0"