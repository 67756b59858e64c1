"""
Infrastructure Layer

Redis repositories, blob storage backends and event handlers.
"""
