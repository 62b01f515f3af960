"""Wiki-derived spirit definitions.

This package contains the "Definitions" layer:
- the spirit catalog model (`EntityRecord`, `EntityCatalog`),
- catalog compilation from wiki sheets and user addenda.
"""
