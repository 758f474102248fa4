"""StormTask — task management backend.

Users own groups, groups hold tasks. Every mutation is authenticated with
a signed session token and checked against the ownership chain
Task → Group → User before it reaches the database.
"""

__version__ = "0.1.0"
