"""
The scheduler is an external collaborator of the bootstrap -- it owns the workers once
started. This package holds the consumed interface (`SchedulerLike`) and an in-process
registry implementing it, which keeps workers in registration order
"""
