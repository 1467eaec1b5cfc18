"""
Catalog modules live under this package.

Each module owns one entity: its model, its service functions (validation +
persistence + audit), and its routes. Templates live under templates/catalog/.
"""
