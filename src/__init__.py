"""
Shoppies Nominations Portal - Source Package

This package contains the core functionality for the nomination portal:
- models: Movie record and share payload value types
- local_storage: Durable key/value storage adapters
- nomination_store: The five-movie nomination list and its persistence
- share_link: Share-link encoding, validation and display titles
- movie_search: OMDb search and lookup
- utils: Configuration, logging setup and constants
"""
