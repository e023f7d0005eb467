"""Lifeboard — personal productivity API.

A thin authenticated REST facade over Supabase: tasks, goals and milestones,
habits and habit logs, daily health tracking, and journal entries, each
scoped to the signed-in user.
"""

__version__ = "0.1.0"
