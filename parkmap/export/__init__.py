"""
Export modules: JSON/GeoJSON output and statistics.
"""
