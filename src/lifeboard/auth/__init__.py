"""Authentication and authorization.

Learn: Lifeboard never mints or verifies tokens itself. Sign-in is an
emailed one-time code handled by Supabase Auth; afterwards the client
sends the Supabase access token as a Bearer header, and the guard asks
Supabase who it belongs to. The resolved identity scopes every query.
"""
