"""Domain layer - business logic organized by concern.

- assets: binary files (local files, remote object storage)
- library: composers, works, recordings and their stores
- sync: push/pull of whole composer subtrees between stores
"""
