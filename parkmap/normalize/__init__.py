"""
Data normalization modules.

Each source has its own normalizer that:
1. Runs the source's ingestor (a failed fetch yields no lots)
2. Joins availability onto descriptions by id
3. Converts TWD97 coordinates to WGS84
4. Drops lots without an id or a location
"""
