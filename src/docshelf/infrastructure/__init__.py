"""Infrastructure layer — content-tree scanning and filesystem mutation.

This layer depends on the stdlib and the domain layer.
It must never import from services, commands, or output.
"""
