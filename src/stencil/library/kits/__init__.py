"""Built-in template kits.

Each subdirectory holding a ``kit.yaml`` manifest is a built-in kit.
"""
