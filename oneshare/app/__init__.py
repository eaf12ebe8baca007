"""Application package: durable share store, quota engine and HTTP surface."""
