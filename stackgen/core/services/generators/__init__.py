"""
Generators — turn resolved stack configuration into candidate files.

Each generator renders zero or more ``GeneratedFile`` candidates for a
stack.  An empty body means the target must not exist on disk.
"""
