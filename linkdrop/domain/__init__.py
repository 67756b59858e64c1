"""
Domain Layer

Pure business logic: artifacts and the access gate, the link registry,
accounts, and the blob storage contract.
"""
