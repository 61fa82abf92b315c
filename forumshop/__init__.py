"""Forum shop: categories, items, inventories, credits and purchases over one relational store."""
