"""
Taxonomy resources: descriptors, generic CRUD and bulk import.
"""
