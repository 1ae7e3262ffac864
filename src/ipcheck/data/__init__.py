"""Bundled crawler IP range snapshots."""
