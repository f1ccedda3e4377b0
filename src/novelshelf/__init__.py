# ABOUTME: novelshelf, a local-first library for serialized fiction.
# ABOUTME: Stores novels, chapter variants, and per-device reading progress in SQLite.
