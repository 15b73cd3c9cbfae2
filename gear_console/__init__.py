"""
gear_console

Client for the inventory admin API: paginated inventory and operation log
tables, edit and delete flows, and a connection monitor. The backend
subpackage serves the same API from memory.
"""

__version__ = "0.1.0"
