"""
Books: catalog titles, each written by one author and tagged with any number of genres.

The catalog home page (record counts) is served from this module too.
"""
