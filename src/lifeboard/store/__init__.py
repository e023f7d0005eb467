"""Remote data store access (Supabase).

Learn: The backend keeps no state of its own. Every read and write is one
HTTP round trip to Supabase, made with the caller's own credential so the
provider's row-level security decides what the caller may touch.
"""
