"""
Services package for the Property Details Service.

Services orchestrate the lookup workflow and depend on the cache and
provider abstractions rather than concrete implementations.
"""
