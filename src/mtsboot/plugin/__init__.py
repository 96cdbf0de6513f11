"""
Utility plugins are native shared libraries exporting two entry points:
 - `GetDescription`, returning a human readable description
 - `CreateInstance`, constructing the utility given an opaque execution context

The submodules are:
 - native: the platform specific loading capability, substitutable in tests
 - module: the plugin handle owning the loaded library
"""
