"""
Adapters package for the Property Details Service.

Holds the abstract interfaces the service layer depends on and the concrete
ATTOM implementation of the property provider.
"""
