"""
Book instances: physical copies of a book that can be borrowed.
"""
