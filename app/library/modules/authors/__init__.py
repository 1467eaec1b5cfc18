"""
Authors: people who wrote books in the catalog.

An author cannot be deleted while any book still references them.
"""
