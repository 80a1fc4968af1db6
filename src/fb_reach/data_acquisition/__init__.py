"""
Data acquisition: targeting specs, throttling and the reach estimate client.
"""
