"""
Network-facing services.

This package handles:
1. Fetching and decoding registry metadata
2. Resolving dist-tags to version records
3. Downloading and extracting tarballs
"""
