"""
mtsboot -- turns a textual configuration into a registered pool of compute workers,
and loads the utility plugin which is to use them.

The subpackages are:
 - low: core types, errors and functional helpers
 - hosts: parsing of host descriptors
 - transport: sockets and remote shell tunnels towards remote workers
 - scheduler: the worker registry the pool is handed to
 - pool: the fail-fast, all-or-nothing bootstrap of the worker pool
 - plugin: loading of native utility plugins
"""

from mtsboot.version import __version__
