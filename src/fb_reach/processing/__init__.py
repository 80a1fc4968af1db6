"""
Processing of reach estimate responses into tables.
"""
