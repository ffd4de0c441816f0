"""
Clients for external services: the Shopify catalog and the draft order service.
"""
