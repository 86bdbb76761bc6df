"""vault-query - Dataview-style queries over a folder of markdown notes"""

__version__ = "0.1.0"
