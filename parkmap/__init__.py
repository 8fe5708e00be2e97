"""
Live parking availability for Taipei and New Taipei.

Pipeline stages:
1. Ingest - Fetch raw description/availability feeds (with relay fallback)
2. Normalize - Convert each source to the common ParkingLot record
3. Merge - Run all sources concurrently and combine their records
4. Export - Write JSON/GeoJSON output and statistics
"""

__version__ = '1.0.0'
