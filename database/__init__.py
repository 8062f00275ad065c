"""
Supabase 연동 (profiles, games)
"""
