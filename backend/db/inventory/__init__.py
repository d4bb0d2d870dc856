"""
Inventory items.

Models:
- InventoryItem (keyed by a sequential display id such as ID001)
"""
