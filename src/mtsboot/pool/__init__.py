"""
Assembly of the worker pool: local workers first, then one remote worker per host, in the
given order. Either every worker gets registered, or none does
"""
