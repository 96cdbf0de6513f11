"""
Low level building blocks of mtsboot -- not expected to be user facing.

 - core: host descriptors, workers and the constants of the bootstrap
 - errors: the error taxonomy, each error carrying its kind
 - func: small functional helpers, most notably the `Either` result type
"""
