"""
Supervisor: child processes and the per-run workspace.
"""
