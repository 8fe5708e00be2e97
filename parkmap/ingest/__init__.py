"""
Data ingestion modules for different sources.

Each source has its own ingestor that:
1. Fetches raw feeds through ResilientFetcher (direct, then relays)
2. Drains pagination where the upstream is paginated
3. Returns a RawFeed of description and availability records
"""
