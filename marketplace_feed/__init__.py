"""Activity and notification aggregation service for the marketplace admin dashboard.

The package re-exports nothing; importers reach into the layer they need
(``domain``, ``application``, ``infrastructure`` or ``interfaces``).
"""
